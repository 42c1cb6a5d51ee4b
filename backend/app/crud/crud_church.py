from typing import List, Optional

from sqlalchemy.orm import Session

from .. import models
from ..utils.auth import get_password_hash, normalize_email


class CRUDChurch:
    def get(self, db: Session, church_id: int) -> Optional[models.Church]:
        return db.query(models.Church).filter(models.Church.id == church_id).first()

    def list(self, db: Session, skip: int = 0, limit: int = 100) -> List[models.Church]:
        return (
            db.query(models.Church)
            .order_by(models.Church.name, models.Church.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_email(self, db: Session, email: str) -> Optional[models.Church]:
        return (
            db.query(models.Church)
            .filter(models.Church.email == normalize_email(email))
            .first()
        )

    def create(self, db: Session, *, password: str, is_admin: bool = False, **attrs) -> models.Church:
        attrs["email"] = normalize_email(attrs["email"])
        church = models.Church(**attrs, password=get_password_hash(password), is_admin=is_admin)
        db.add(church)
        db.commit()
        db.refresh(church)
        return church


church = CRUDChurch()
