"""Pydantic schemas for HAJJ / OUMRAH campaigns."""

from datetime import datetime

from pydantic import Field, field_validator

from bmvt.db.models import VoyageName
from bmvt.schemas.common import InputModel, RowModel

MAX_OFFRES_LENGTH = 5000


class VoyageCreate(InputModel):
    """Voyage definition; updates are merged with the stored voyage first."""

    nom: str | None = Field(None, validate_default=True)
    annee: int | None = Field(None, validate_default=True)
    offres: str | None = None

    @field_validator("nom")
    @classmethod
    def validate_nom(cls, v: str | None) -> str:
        nom = (v or "").upper()
        if nom not in [name.value for name in VoyageName]:
            raise ValueError("nom doit être 'HAJJ' ou 'OUMRAH'")
        return nom

    @field_validator("annee", mode="before")
    @classmethod
    def validate_annee(cls, v) -> int:
        try:
            annee = int(v)
        except (TypeError, ValueError):
            raise ValueError("Année invalide")
        if annee < 2000 or annee > 2100:
            raise ValueError("Année invalide")
        return annee

    @field_validator("offres", mode="before")
    @classmethod
    def validate_offres(cls, v) -> str | None:
        if v is None:
            return v
        v = str(v)
        if len(v) > MAX_OFFRES_LENGTH:
            raise ValueError("Le champ 'offres' est trop long (max 5000 caractères).")
        return v


class VoyageOut(RowModel):
    id: int
    nom: str
    annee: int
    offres: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
