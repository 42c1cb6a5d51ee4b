from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import JWTError, jwt

from ..database import get_db
from ..models import Church
from ..schemas.church import TokenData
from ..core.config import settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def decode_token(token: str) -> TokenData:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    sub = payload.get("sub")
    if sub is None:
        raise JWTError("missing subject")
    try:
        church_id = int(sub)
    except (TypeError, ValueError):
        raise JWTError("malformed subject")
    return TokenData(church_id=church_id, is_admin=bool(payload.get("adm")))


def get_current_church(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Church:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        token_data = decode_token(token)
    except JWTError:
        raise credentials_exception
    church = db.query(Church).filter(Church.id == token_data.church_id).first()
    if church is None:
        raise credentials_exception
    return church


def get_current_admin(current_church: Church = Depends(get_current_church)) -> Church:
    """Admin rights come from the stored flag, so revoking them takes effect at once."""
    if not current_church.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_church
