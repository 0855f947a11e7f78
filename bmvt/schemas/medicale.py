"""Pydantic schemas for medical forms."""

from datetime import datetime

from pydantic import field_validator, model_validator

from bmvt.core.validation import PASSPORT_MESSAGE, ValidationUtils
from bmvt.schemas.common import InputModel, RowModel


class MedicaleFields(InputModel):
    numero_cmah: str | None = None
    passeport: str | None = None
    nom: str | None = None
    prenoms: str | None = None
    pouls: str | None = None
    carnet_vaccins: str | None = None
    groupe_sanguin: str | None = None
    covid: str | None = None
    poids: str | None = None
    tension: str | None = None
    vulnerabilite: str | None = None
    diabete: str | None = None
    maladie_cardiaque: str | None = None
    analyse_psychiatrique: str | None = None
    accompagnements: str | None = None
    examen_paraclinique: str | None = None
    antecedents: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_text(cls, v):
        # Vitals may be posted as numbers; columns are free text.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("passeport")
    @classmethod
    def validate_passport(cls, v: str | None) -> str | None:
        return None if v is None else ValidationUtils.validate_passport(v)


class MedicaleCreate(MedicaleFields):
    @model_validator(mode="after")
    def require_passport(self):
        if not self.passeport:
            raise ValueError(PASSPORT_MESSAGE)
        return self


class MedicaleUpdate(MedicaleFields):
    pass


class MedicaleOut(RowModel):
    id: int
    pelerin_id: int | None = None
    numero_cmah: str | None = None
    passeport: str
    nom: str | None = None
    prenoms: str | None = None
    pouls: str | None = None
    carnet_vaccins: str | None = None
    groupe_sanguin: str | None = None
    covid: str | None = None
    poids: str | None = None
    tension: str | None = None
    vulnerabilite: str | None = None
    diabete: str | None = None
    maladie_cardiaque: str | None = None
    analyse_psychiatrique: str | None = None
    accompagnements: str | None = None
    examen_paraclinique: str | None = None
    antecedents: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
