from .crud_church import church
from .crud_venue import venue
from .crud_equipment import equipment
from .crud_booking import booking
