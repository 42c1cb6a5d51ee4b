"""Shared storage logic for the two bookable resource kinds."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from sqlalchemy.orm import Session, joinedload

from .. import models
from ..database import run_in_transaction
from ..utils.errors import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", models.Venue, models.Equipment)


def to_price(value: Any, field: str) -> Optional[Decimal]:
    """Coerce a price to Decimal, rejecting garbage and negatives."""
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not price.is_finite() or price < 0:
        raise ValidationError(f"{field} must be a non-negative number", field=field)
    return price


class CatalogCRUD(Generic[ModelT]):
    model: Type[ModelT]
    label: str
    # Columns the owner may set through create/update
    fields: tuple[str, ...] = ()

    def get(self, db: Session, item_id: int, *, lock: bool = False) -> Optional[ModelT]:
        query = (
            db.query(self.model)
            .options(joinedload(self.model.church))
            .filter(self.model.id == item_id)
        )
        if lock:
            query = query.with_for_update(of=self.model).populate_existing()
        return query.first()

    def get_or_404(self, db: Session, item_id: int, *, lock: bool = False) -> ModelT:
        item = self.get(db, item_id, lock=lock)
        if item is None:
            raise NotFoundError(f"{self.label} not found")
        return item

    def list_for_owner(self, db: Session, owner_id: int) -> List[ModelT]:
        return (
            db.query(self.model)
            .filter(self.model.church_id == owner_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .all()
        )

    def clean(self, attrs: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
        """Return validated column values; subclasses add their own rules."""
        data = {k: v for k, v in attrs.items() if k in self.fields or k == "is_available"}
        if "name" in data or not partial:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("Name is required", field="name")
            data["name"] = name
        return data

    def check_complete(self, item: ModelT) -> None:
        """Validate the merged record after an update."""

    def check_bookings(self, db: Session, item: ModelT) -> None:
        """Reject updates that existing bookings can no longer fit."""

    def create(self, db: Session, owner_id: int, attrs: Mapping[str, Any]) -> ModelT:
        data = self.clean(attrs, partial=False)
        data.pop("is_available", None)
        item = self.model(**data, church_id=owner_id, is_available=True)
        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info("Church %s created %s %s", owner_id, self.label.lower(), item.id)
        return item

    def _owned(self, db: Session, owner_id: int, item_id: int, *, lock: bool = False) -> ModelT:
        item = self.get_or_404(db, item_id, lock=lock)
        if item.church_id != owner_id:
            raise ForbiddenError("Not authorized")
        return item

    def update(self, db: Session, owner_id: int, item_id: int, attrs: Mapping[str, Any]) -> ModelT:
        """Partial update, run as one writer transaction.

        ``check_bookings`` sees the merged record while the row is locked, so
        a booking created concurrently cannot slip past it.
        """

        def _work(session: Session) -> ModelT:
            item = self._owned(session, owner_id, item_id, lock=True)
            data = self.clean(attrs, partial=True)
            for key, value in data.items():
                setattr(item, key, value)
            self.check_complete(item)
            self.check_bookings(session, item)
            return item

        item = run_in_transaction(db, _work)
        db.refresh(item)
        return item

    def _is_referenced(self, db: Session, item: ModelT) -> bool:
        raise NotImplementedError

    def delete(self, db: Session, owner_id: Optional[int], item_id: int) -> bool:
        """Remove a listing; returns False when it was only disabled.

        Listings that bookings still point at are switched off instead of
        deleted. ``owner_id=None`` skips the ownership check (admin use).
        """
        if owner_id is None:
            item = self.get_or_404(db, item_id)
        else:
            item = self._owned(db, owner_id, item_id)
        if self._is_referenced(db, item):
            item.is_available = False
            db.commit()
            logger.info("%s %s has bookings; disabled instead of deleted", self.label, item_id)
            return False
        db.delete(item)
        db.commit()
        return True
