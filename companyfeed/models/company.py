"""Company record — the single domain entity read from the ``companies`` collection.

Instances are created fresh on every snapshot and never mutated.  Wire keys
follow the store's camelCase (``logoUrl``); Python attributes are snake_case.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

PHONE_PLACEHOLDER = "N/A"

# Ids map to a 32-bit signed int on every client of the collection.
ID_MIN = -(2**31)
ID_MAX = 2**31 - 1


class RecordDecodeError(ValueError):
    """Raised when a collection child cannot be decoded into a Company."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"child {key!r}: {message}")
        self.key = key


class Company(BaseModel):
    """A company as stored under ``/companies/<key>``.

    ``id`` is only a sort key — the store does not enforce uniqueness.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(default=0, strict=True, ge=ID_MIN, le=ID_MAX)
    title: str = ""
    city: str = ""
    webpage: str = ""
    logo_url: str | None = Field(default=None, alias="logoUrl")
    phone: str | None = None

    @field_validator("title", "city", "webpage", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        # The store writes null for cleared fields; treat as unset.
        return "" if value is None else value

    @field_validator("id", mode="before")
    @classmethod
    def _narrow_id(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, bool):
            raise ValueError("id must be a number, not a boolean")
        # JSON numbers like 2.0 arrive as floats.
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @property
    def display_phone(self) -> str:
        """Phone number for display, ``"N/A"`` when absent."""
        return self.phone if self.phone is not None else PHONE_PLACEHOLDER

    @property
    def has_logo(self) -> bool:
        return self.logo_url is not None

    @classmethod
    def decode(cls, key: str, raw: Any) -> Company:
        """Decode one collection child.

        Raises
        ------
        RecordDecodeError
            If *raw* is not an object or its fields have the wrong shape.
        """
        if not isinstance(raw, Mapping):
            raise RecordDecodeError(
                key, f"expected an object, got {type(raw).__name__}"
            )
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as exc:
            raise RecordDecodeError(key, str(exc)) from exc
