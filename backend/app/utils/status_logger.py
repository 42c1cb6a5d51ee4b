import logging
from sqlalchemy import event
from sqlalchemy.orm.attributes import NO_VALUE

from .. import models

logger = logging.getLogger(__name__)

_registered = False


def _status_change(target, value, oldvalue, initiator):  # noqa: ANN001
    if oldvalue is NO_VALUE or oldvalue is None or oldvalue == value:
        return value
    logger.info(
        "Booking id=%s status changed from %s to %s",
        getattr(target, "id", "unknown"),
        getattr(oldvalue, "value", oldvalue),
        getattr(value, "value", value),
    )
    return value


def register_status_listeners() -> None:
    """Log every change to ``Booking.status``. Safe to call more than once."""
    global _registered
    if _registered:
        return
    event.listen(models.Booking.status, "set", _status_change, retval=False)
    _registered = True
