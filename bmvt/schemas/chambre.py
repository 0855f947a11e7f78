"""Pydantic schemas for hotel rooms and their occupants."""

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from bmvt.core.validation import ValidationUtils
from bmvt.schemas.common import CamelRowModel, InputModel

DEFAULT_ROOM_TYPE = "double"


class RoomCreate(InputModel):
    """Room definition; updates are merged with the stored room first."""

    hotel: str | None = None
    city: str | None = None
    type: str | None = None
    capacity: int | None = None

    @field_validator("type")
    @classmethod
    def lower_type(cls, v: str | None) -> str | None:
        return v.lower() if v else v

    @field_validator("capacity")
    @classmethod
    def check_capacity(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("La capacité doit être au moins 1.")
        return v

    @model_validator(mode="after")
    def apply_defaults(self):
        if not self.hotel or not self.city:
            raise ValueError("Champs requis manquants (hotel, city).")
        self.type = self.type or DEFAULT_ROOM_TYPE
        self.capacity = self.capacity or 1
        return self


class OccupantCreate(InputModel):
    name: str | None = None
    passport: str | None = None
    photo_url: str | None = Field(None, alias="photoUrl")

    @field_validator("passport")
    @classmethod
    def normalize_passport(cls, v: str | None) -> str | None:
        return None if v is None else ValidationUtils.validate_passport(v)

    @model_validator(mode="after")
    def require_name(self):
        if not self.name:
            raise ValueError("Nom requis")
        return self


class OccupantOut(CamelRowModel):
    id: int
    name: str
    passport: str | None = None
    photo_url: str | None = None


class RoomOut(CamelRowModel):
    id: int
    hotel: str
    city: str
    type: str
    capacity: int
    occupants: list[OccupantOut] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
