"""
Pydantic schemas for payments and installments (versements).

Amounts are exposed in camelCase (``totalDu``, ``createdAt``) as the
payment screens expect.
"""

import datetime as dt

from pydantic import AliasChoices, Field, field_validator, model_validator

from bmvt.core.validation import ValidationUtils, blank_to_none
from bmvt.schemas.common import CamelRowModel, InputModel

DEFAULT_PAYMENT_MODE = "Espèces"
DEFAULT_PAYMENT_STATUS = "Partiel"
DEFAULT_VERSEMENT_STATUS = "En cours"
REQUIRED_MESSAGE = "Champs requis manquants (passeport, nom)."


def _zero_blank_amounts(data: dict, keys: tuple[str, ...]) -> dict:
    return {k: (0 if k in keys and blank_to_none(v) is None else v) for k, v in data.items()}


class PaymentCreate(InputModel):
    passeport: str | None = None
    nom: str | None = None
    prenoms: str | None = None
    mode: str | None = None
    montant: float = 0
    total_du: float = Field(0, validation_alias=AliasChoices("totalDu", "total_du"))
    reduction: float = 0
    date: dt.date | None = None
    statut: str | None = None

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data):
        if isinstance(data, dict):
            if not blank_to_none(data.get("passeport")) or not blank_to_none(data.get("nom")):
                raise ValueError(REQUIRED_MESSAGE)
            data = _zero_blank_amounts(data, ("montant", "totalDu", "total_du", "reduction"))
        return data

    @field_validator("passeport")
    @classmethod
    def validate_passport(cls, v: str | None) -> str | None:
        return None if v is None else ValidationUtils.validate_passport(v)

    @model_validator(mode="after")
    def apply_defaults(self):
        self.mode = self.mode or DEFAULT_PAYMENT_MODE
        self.statut = self.statut or DEFAULT_PAYMENT_STATUS
        self.date = self.date or dt.date.today()
        return self


class VersementCreate(InputModel):
    """Installment as posted from the payment screen."""

    passeport: str | None = None
    nom: str | None = None
    prenoms: str | None = None
    echeance: dt.date | None = None
    verse: float = 0
    restant: float = 0
    statut: str | None = None

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data):
        if isinstance(data, dict):
            if not blank_to_none(data.get("passeport")) or not blank_to_none(data.get("nom")):
                raise ValueError(REQUIRED_MESSAGE)
            data = _zero_blank_amounts(data, ("verse", "restant"))
        return data

    @field_validator("passeport")
    @classmethod
    def validate_passport(cls, v: str | None) -> str | None:
        return None if v is None else ValidationUtils.validate_passport(v)

    @model_validator(mode="after")
    def apply_defaults(self):
        self.statut = self.statut or DEFAULT_VERSEMENT_STATUS
        self.echeance = self.echeance or dt.date.today()
        return self


class StrictVersementCreate(VersementCreate):
    """Installment posted to ``/api/versements``: amounts are checked."""

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data):
        if not isinstance(data, dict):
            return data
        if not blank_to_none(data.get("passeport")):
            raise ValueError("Le champ 'passeport' est obligatoire.")
        if not blank_to_none(data.get("nom")):
            raise ValueError("Le champ 'nom' est obligatoire.")

        amounts = {}
        for key, message, minimum_exclusive in (
            ("verse", "Le champ 'verse' doit être un nombre > 0.", True),
            ("restant", "Le champ 'restant' doit être un nombre ≥ 0.", False),
        ):
            try:
                value = float(blank_to_none(data.get(key)) or 0)
            except (TypeError, ValueError):
                raise ValueError(message)
            if value < 0 or (minimum_exclusive and value == 0):
                raise ValueError(message)
            amounts[key] = value
        return {**data, **amounts}


class PaymentOut(CamelRowModel):
    id: int
    ref: str
    passeport: str
    nom: str
    prenoms: str | None = None
    mode: str | None = None
    montant: float = 0
    total_du: float = 0
    reduction: float = 0
    date: dt.date | None = None
    statut: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class VersementOut(CamelRowModel):
    id: int
    passeport: str
    nom: str
    prenoms: str | None = None
    echeance: dt.date | None = None
    verse: float = 0
    restant: float = 0
    statut: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
