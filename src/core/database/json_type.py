"""JSONB column type for campaign configs, pass state and automation configs."""

import logging
from typing import Any

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


class JSONType(TypeDecorator):
    """PostgreSQL JSONB that only ever stores objects.

    Python None becomes SQL NULL. Values are expected to be dumped from the
    pydantic models in src.core.schemas before they reach the column; anything
    that is not a dict is replaced with an empty object.
    """

    impl = JSONB(none_as_null=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> dict | None:
        if value is None:
            return None

        if hasattr(value, "model_dump"):
            return value.model_dump(mode="json", exclude_none=True)

        if not isinstance(value, dict):
            logger.warning(f"JSONType received non-object value: {type(value).__name__}. Storing empty object.")
            return {}

        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> dict | None:
        if value is None:
            return None

        if isinstance(value, dict):
            return value

        raise TypeError(f"Unexpected type in JSONB column: {type(value).__name__}. Expected a JSON object.")
