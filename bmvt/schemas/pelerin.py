"""
Pydantic schemas for pilgrim records.

Forms send camelCase names (``numPasseport``, ``anneeVoyage``) while older
clients send column names; both are accepted.
"""

from datetime import date, datetime

from pydantic import AliasChoices, Field, field_validator, model_validator

from bmvt.core.validation import ValidationUtils, blank_to_none
from bmvt.db.models import Gender
from bmvt.schemas.common import InputModel, RowModel

REQUIRED_MESSAGE = "Champs obligatoires manquants."
SEX_MESSAGE = "Sexe invalide (M/F)."


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class PelerinFields(InputModel):
    """Editable pilgrim fields, all optional."""

    nom: str | None = None
    prenoms: str | None = None
    date_naissance: date | None = Field(None, validation_alias=_alias("date_naissance", "dateNaissance"))
    lieu_naissance: str | None = Field(None, validation_alias=_alias("lieu_naissance", "lieuNaissance"))
    sexe: str | None = None
    adresse: str | None = None
    contact: str | None = Field(None, validation_alias=_alias("contact", "contacts"))
    num_passeport: str | None = Field(None, validation_alias=_alias("num_passeport", "numPasseport"))
    offre: str | None = None
    voyage: str | None = None
    annee_voyage: int | None = Field(None, validation_alias=_alias("annee_voyage", "anneeVoyage"))
    ur_nom: str | None = Field(None, validation_alias=_alias("ur_nom", "urNom", "urgenceNom"))
    ur_prenoms: str | None = Field(
        None, validation_alias=_alias("ur_prenoms", "urPrenoms", "urgencePrenoms")
    )
    ur_contact: str | None = Field(
        None, validation_alias=_alias("ur_contact", "urContact", "urgenceContact")
    )
    ur_residence: str | None = Field(
        None, validation_alias=_alias("ur_residence", "urResidence", "urgenceResidence")
    )

    @field_validator("sexe")
    @classmethod
    def validate_sexe(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.upper()
        if v not in [g.value for g in Gender]:
            raise ValueError(SEX_MESSAGE)
        return v

    @field_validator("num_passeport")
    @classmethod
    def validate_passport(cls, v: str | None) -> str | None:
        return None if v is None else ValidationUtils.validate_passport(v)


class PelerinCreate(PelerinFields):
    """Schema for creating a pilgrim from the registration form."""

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data):
        if isinstance(data, dict):
            required = (
                ("nom",),
                ("prenoms",),
                ("dateNaissance", "date_naissance"),
                ("sexe",),
                ("contact", "contacts"),
                ("numPasseport", "num_passeport"),
                ("anneeVoyage", "annee_voyage"),
            )
            for names in required:
                if not any(blank_to_none(data.get(name)) for name in names):
                    raise ValueError(REQUIRED_MESSAGE)
        return data


class PelerinUpdate(PelerinFields):
    """Partial update; only provided fields change."""

    pass


class PelerinOut(RowModel):
    id: int
    photo_pelerin_path: str | None = None
    photo_passeport_path: str | None = None
    nom: str
    prenoms: str
    date_naissance: date | None = None
    lieu_naissance: str | None = None
    sexe: str | None = None
    adresse: str | None = None
    contact: str | None = None
    num_passeport: str | None = None
    offre: str | None = None
    voyage: str | None = None
    annee_voyage: int | None = None
    ur_nom: str | None = None
    ur_prenoms: str | None = None
    ur_contact: str | None = None
    ur_residence: str | None = None
    created_by_name: str | None = None
    created_by_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
