import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from .. import models
from ..models.equipment import EquipmentCategory
from ..schemas.equipment import EquipmentFilters
from ..core.config import business_now
from ..utils.errors import ConflictError, ValidationError
from .crud_booking import booking as booking_crud
from .crud_catalog import CatalogCRUD, to_price

logger = logging.getLogger(__name__)


class CRUDEquipment(CatalogCRUD[models.Equipment]):
    model = models.Equipment
    label = "Equipment"
    fields = (
        "name",
        "description",
        "category",
        "price_per_hour",
        "price_per_day",
        "quantity",
        "images",
    )

    def list_available(
        self, db: Session, filters: Optional[EquipmentFilters] = None, skip: int = 0, limit: int = 100
    ) -> List[models.Equipment]:
        filters = filters or EquipmentFilters()
        query = (
            db.query(models.Equipment)
            .options(joinedload(models.Equipment.church))
            .filter(models.Equipment.is_available.is_(True))
        )
        if filters.category is not None:
            query = query.filter(models.Equipment.category == filters.category)
        if filters.max_price is not None:
            query = query.filter(
                or_(
                    models.Equipment.price_per_hour <= filters.max_price,
                    models.Equipment.price_per_day <= filters.max_price,
                )
            )
        return (
            query.order_by(models.Equipment.created_at.desc(), models.Equipment.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def clean(self, attrs: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
        data = super().clean(attrs, partial=partial)
        for field in ("price_per_hour", "price_per_day"):
            if field in data:
                data[field] = to_price(data[field], field)
        if not partial and data.get("price_per_hour") is None and data.get("price_per_day") is None:
            raise ValidationError(
                "An hourly or daily price is required", field="price_per_hour"
            )
        if data.get("category") is not None:
            try:
                data["category"] = EquipmentCategory(data["category"])
            except ValueError:
                raise ValidationError("Unknown equipment category", field="category")
        if "quantity" in data or not partial:
            quantity = data.get("quantity", 1)
            if quantity is None and not partial:
                quantity = 1
            try:
                quantity = int(quantity)
            except (TypeError, ValueError):
                raise ValidationError("Quantity must be a whole number", field="quantity")
            if quantity < 1:
                raise ValidationError("Quantity must be at least 1", field="quantity")
            data["quantity"] = quantity
        if "images" in data:
            data["images"] = [str(uri) for uri in (data["images"] or [])]
        return data

    def check_complete(self, item: models.Equipment) -> None:
        if item.price_per_hour is None and item.price_per_day is None:
            raise ValidationError("An hourly or daily price is required", field="price_per_hour")

    def check_bookings(self, db: Session, item: models.Equipment) -> None:
        """Active future bookings must still fit in the remaining units."""
        peak = booking_crud.equipment_peak_units(db, item.id, business_now())
        if item.quantity < peak:
            logger.info(
                "Refused quantity %s for equipment %s: %s units already booked", item.quantity, item.id, peak
            )
            raise ConflictError("Quantity cannot be lower than units already booked")

    def _is_referenced(self, db: Session, item: models.Equipment) -> bool:
        direct = (
            db.query(models.Booking.id).filter(models.Booking.equipment_id == item.id).first()
        )
        if direct is not None:
            return True
        add_on = (
            db.query(models.BookingEquipment.id)
            .filter(models.BookingEquipment.equipment_id == item.id)
            .first()
        )
        return add_on is not None


equipment = CRUDEquipment()
