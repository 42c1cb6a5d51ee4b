import os

from dotenv import load_dotenv

# Read .env into os.environ before the app builds its settings
load_dotenv()

from fastapi.openapi.utils import get_openapi  # noqa: E402
from app.main import app  # noqa: E402


def custom_openapi() -> dict:
    """Return OpenAPI schema with project metadata."""
    if app.openapi_schema:
        return app.openapi_schema
    app.openapi_schema = get_openapi(
        title="Church Venue Booking API",
        version="1.0.0",
        description=(
            "API for churches to list venues and equipment, book each other's "
            "resources, and approve or reject incoming requests."
        ),
        contact={"name": "Church Venue Support", "email": "support@churchvenue.co.za"},
        routes=app.routes,
    )
    return app.openapi_schema


app.openapi = custom_openapi

if __name__ == "__main__":
    import uvicorn

    workers = int(os.getenv("UVICORN_WORKERS", "1"))
    keepalive = int(os.getenv("UVICORN_KEEPALIVE", "65"))
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=os.getenv("UVICORN_RELOAD", "0") == "1",
        workers=workers,
        timeout_keep_alive=keepalive,
    )
