import json
import logging

from sqlalchemy import Enum as SAEnum, Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


class CaseInsensitiveEnum(SAEnum):
    """Enum column type that accepts case-insensitive values."""

    def __init__(self, enum_cls, **kwargs):
        self._enum_cls = enum_cls
        self._enum_kwargs = kwargs.copy()
        kwargs.setdefault("values_callable", lambda enum: [e.value for e in enum])
        kwargs.setdefault("native_enum", False)
        super().__init__(enum_cls, **kwargs)

    def adapt(self, impltype, **kw):
        params = {**self._enum_kwargs, **kw}
        return CaseInsensitiveEnum(self._enum_cls, **params)

    def bind_processor(self, dialect):
        parent = super().bind_processor(dialect)

        def process(value):
            if value is None:
                return None
            if isinstance(value, str):
                value = value.lower()
            else:
                value = value.value
            if parent:
                return parent(value)
            return value

        return process

    def result_processor(self, dialect, coltype):
        parent = super().result_processor(dialect, coltype)

        def process(value):
            if value is None:
                return None
            if isinstance(value, str):
                value = value.lower()
            if parent:
                return parent(value)
            return value

        return process


class JSONEncodedList(TypeDecorator):
    """List stored as a JSON array in a TEXT column.

    Empty lists are stored as NULL. Text that is not a JSON array decodes
    to an empty list so one bad row never breaks a listing page.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if not value:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value, dialect):
        if not value:
            return []
        try:
            decoded = json.loads(value)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed JSON list column value: %r", value)
            return []
        if not isinstance(decoded, list):
            return []
        return decoded
