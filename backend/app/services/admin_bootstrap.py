from __future__ import annotations

import logging
import os
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import SessionLocal
from .. import crud, models

logger = logging.getLogger(__name__)

DEFAULT_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@churchvenue.co.za")
DEFAULT_NAME = os.getenv("DEFAULT_ADMIN_NAME", "Platform Admin")


def ensure_default_admin(session: Optional[Session] = None) -> Optional[models.Church]:
    """Create an admin church account if none exists.

    Runs only when DEFAULT_ADMIN_PASSWORD is set, so fresh installs never
    ship with a guessable admin login. An existing account with the default
    email is promoted instead of duplicated.
    """
    password = os.getenv("DEFAULT_ADMIN_PASSWORD", "")
    if not password:
        return None

    owns_session = session is None
    db: Session = session or SessionLocal()
    try:
        if db.query(models.Church).filter(models.Church.is_admin.is_(True)).first():
            return None
        existing = crud.church.get_by_email(db, DEFAULT_EMAIL)
        if existing is not None:
            existing.is_admin = True
            db.commit()
            logger.info("Promoted church %s to admin", existing.id)
            return existing
        admin = crud.church.create(
            db, password=password, is_admin=True, name=DEFAULT_NAME, email=DEFAULT_EMAIL
        )
        logger.info("Created default admin church %s", admin.id)
        return admin
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()
