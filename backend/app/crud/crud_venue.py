from typing import Any, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from .. import models
from ..models.venue import Amenity
from ..schemas.venue import VenueFilters
from ..utils.errors import ValidationError
from .crud_catalog import CatalogCRUD, to_price


class CRUDVenue(CatalogCRUD[models.Venue]):
    model = models.Venue
    label = "Venue"
    fields = (
        "name",
        "description",
        "capacity",
        "price_per_hour",
        "price_per_half_day",
        "price_per_day",
        "address",
        "city",
        "province",
        "zip_code",
        "amenities",
        "images",
    )

    def list_available(
        self, db: Session, filters: Optional[VenueFilters] = None, skip: int = 0, limit: int = 100
    ) -> List[models.Venue]:
        filters = filters or VenueFilters()
        query = (
            db.query(models.Venue)
            .join(models.Church, models.Venue.church_id == models.Church.id)
            .options(joinedload(models.Venue.church))
            .filter(models.Venue.is_available.is_(True))
        )
        if filters.city:
            pattern = f"%{filters.city.strip()}%"
            query = query.filter(or_(models.Venue.city.ilike(pattern), models.Church.city.ilike(pattern)))
        if filters.province:
            pattern = f"%{filters.province.strip()}%"
            query = query.filter(
                or_(models.Venue.province.ilike(pattern), models.Church.province.ilike(pattern))
            )
        if filters.min_capacity is not None:
            query = query.filter(models.Venue.capacity >= filters.min_capacity)
        if filters.max_price is not None:
            query = query.filter(models.Venue.price_per_hour <= filters.max_price)
        return (
            query.order_by(models.Venue.created_at.desc(), models.Venue.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def clean(self, attrs: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
        data = super().clean(attrs, partial=partial)
        for field in ("price_per_hour", "price_per_half_day", "price_per_day"):
            if field in data:
                data[field] = to_price(data[field], field)
        if not partial and data.get("price_per_hour") is None:
            raise ValidationError("Valid price is required", field="price_per_hour")
        if data.get("capacity") is not None:
            try:
                data["capacity"] = int(data["capacity"])
            except (TypeError, ValueError):
                raise ValidationError("Capacity must be a number", field="capacity")
            if data["capacity"] < 0:
                raise ValidationError("Capacity must be a number", field="capacity")
        if "amenities" in data:
            try:
                # Amenities form a set; keep first-seen order for display
                tags = [Amenity(tag).value for tag in (data["amenities"] or [])]
            except ValueError:
                raise ValidationError("Unknown amenity", field="amenities")
            data["amenities"] = list(dict.fromkeys(tags))
        if "images" in data:
            data["images"] = [str(uri) for uri in (data["images"] or [])]
        return data

    def check_complete(self, item: models.Venue) -> None:
        if item.price_per_hour is None:
            raise ValidationError("Valid price is required", field="price_per_hour")

    def _is_referenced(self, db: Session, item: models.Venue) -> bool:
        return (
            db.query(models.Booking.id).filter(models.Booking.venue_id == item.id).first()
            is not None
        )


venue = CRUDVenue()
