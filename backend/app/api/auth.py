# backend/app/api/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from jose import jwt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from ..database import get_db
from .. import crud, models
from ..schemas.church import ChurchCreate, ChurchLogin, ChurchResponse, Token
from ..utils.auth import password_problems, verify_password
from ..utils.errors import error_response
from ..notifications.intents import booking_lifecycle
from ..core.config import settings
from .dependencies import get_current_church

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES


def create_access_token(church: models.Church, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a bearer token for ``church``; ``sub`` is the church id."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": str(church.id), "adm": bool(church.is_admin), "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def _token_payload(church: models.Church) -> Token:
    return Token(
        access_token=create_access_token(church),
        token_type="bearer",
        church=ChurchResponse.model_validate(church),
    )


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(church_data: ChurchCreate, db: Session = Depends(get_db)):
    problems = password_problems(church_data.password)
    if problems:
        raise error_response(problems[0], {"password": "; ".join(problems)})

    if crud.church.get_by_email(db, church_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A church with that email already exists",
        )

    db_church = crud.church.create(
        db,
        password=church_data.password,
        **church_data.model_dump(exclude={"password"}),
    )
    logger.info("Registered church %s", db_church.id)
    try:
        booking_lifecycle.send_welcome_notification(db_church)
    except Exception as exc:
        logger.error("Failed to queue welcome email for church %s: %s", db_church.id, exc)
    return _token_payload(db_church)


async def _read_credentials(request: Request) -> ChurchLogin:
    """Accept the OAuth2 password form (username=email) or a JSON body."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            data = await request.json()
        else:
            form = await request.form()
            data = {
                "email": form.get("username") or form.get("email"),
                "password": form.get("password"),
            }
        return ChurchLogin.model_validate(data)
    except (PydanticValidationError, ValueError):
        raise error_response(
            "Email and password are required",
            {"email": "required", "password": "required"},
        )


@router.post("/login", response_model=Token)
async def login(request: Request, db: Session = Depends(get_db)):
    credentials = await _read_credentials(request)
    church = crud.church.get_by_email(db, credentials.email)
    if not church or not verify_password(credentials.password, church.password):
        logger.info("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_payload(church)


@router.get("/me", response_model=ChurchResponse)
def read_current_church(current_church: models.Church = Depends(get_current_church)):
    """Return the authenticated church."""
    return current_church
