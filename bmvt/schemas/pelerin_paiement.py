"""Pydantic schemas for the joined pilgrim + payment view."""

from pydantic import Field, field_validator

from bmvt.schemas.common import CamelRowModel


class PelerinSummary(CamelRowModel):
    """Pilgrim as shown on the payment screen."""

    id: int
    nom: str
    prenoms: str | None = None
    passeport: str = Field("", validation_alias="num_passeport")
    offre: str | None = None
    prix_offre: float = 0
    photo_pelerin: str | None = Field(None, validation_alias="photo_pelerin_path")
    photo_passeport: str | None = Field(None, validation_alias="photo_passeport_path")
    contact: str | None = None

    @field_validator("prix_offre", mode="before")
    @classmethod
    def zero_when_unknown(cls, v):
        return 0 if v is None else v
