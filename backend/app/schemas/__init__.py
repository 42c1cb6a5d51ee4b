from .church import (
    ChurchBase,
    ChurchCreate,
    ChurchLogin,
    ChurchProfile,
    ChurchResponse,
    ChurchSummary,
    Token,
    TokenData,
)
from .venue import VenueBase, VenueCreate, VenueUpdate, VenueFilters, VenueResponse, VenueNested
from .equipment import (
    EquipmentBase,
    EquipmentCreate,
    EquipmentUpdate,
    EquipmentFilters,
    EquipmentResponse,
    EquipmentNested,
)
from .booking import (
    AdminStats,
    BookingCreate,
    BookingCreated,
    BookingEquipmentResponse,
    BookingResponse,
    BookingStatusUpdate,
    MessageResponse,
)
