"""Pydantic schemas for travel offers."""

import datetime as dt

from pydantic import AliasChoices, Field, field_validator, model_validator

from bmvt.schemas.common import CamelRowModel, InputModel


class OffreCreate(InputModel):
    """Offer definition; updates are merged with the stored offer first."""

    nom: str | None = None
    prix: float | None = None
    hotel: str | None = None
    date_depart: dt.date | None = Field(
        None, validation_alias=AliasChoices("date_depart", "dateDepart")
    )
    date_arrivee: dt.date | None = Field(
        None, validation_alias=AliasChoices("date_arrivee", "dateArrivee")
    )

    @field_validator("prix")
    @classmethod
    def check_price(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Le prix doit être supérieur à 0.")
        return v

    @model_validator(mode="after")
    def check_fields(self):
        if not (self.nom and self.prix and self.hotel and self.date_depart and self.date_arrivee):
            raise ValueError("Champs requis manquants")
        if self.date_arrivee < self.date_depart:
            raise ValueError("La date d'arrivée ne peut pas précéder la date de départ.")
        return self


class OffreOut(CamelRowModel):
    id: int
    nom: str
    prix: float
    hotel: str | None = None
    date_depart: dt.date | None = None
    date_arrivee: dt.date | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
