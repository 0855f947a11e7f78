"""
Pydantic schemas for flights and their passengers.

Flights travel on the wire as ``{code, company, from: {code, date},
to: {code, date}, duration, passengers}``.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from bmvt.core.validation import IATA_MESSAGE, ValidationUtils, blank_to_none
from bmvt.schemas.common import CamelRowModel, InputModel

UNASSIGNED_SEAT = "—"
ARRIVAL_MESSAGE = "L'arrivée doit être postérieure au départ."


class FlightEndpoint(InputModel):
    code: str | None = None
    date: datetime | None = None

    @field_validator("date")
    @classmethod
    def to_naive_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is not None:
            return v.astimezone(UTC).replace(tzinfo=None)
        return v


class FlightCreate(InputModel):
    """
    Full flight definition.

    Updates merge the stored flight with the submitted fields and validate
    the result with this schema as well.
    """

    code: str
    company: str
    from_: FlightEndpoint = Field(alias="from")
    to: FlightEndpoint
    duration: str

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data):
        if isinstance(data, dict):
            ends = [data.get("from") or {}, data.get("to") or {}]
            present = [blank_to_none(data.get(k)) for k in ("code", "company", "duration")]
            for end in ends:
                if not isinstance(end, dict):
                    raise ValueError("Champs requis manquants.")
                present += [blank_to_none(end.get("code")), blank_to_none(end.get("date"))]
            if not all(present):
                raise ValueError("Champs requis manquants.")
            data = dict(data)
            if isinstance(data.get("duration"), (int, float)):
                data["duration"] = str(data["duration"])
        return data

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return "".join(v.split()).upper()

    @model_validator(mode="after")
    def check_route(self):
        try:
            self.from_.code = ValidationUtils.validate_iata(self.from_.code)
            self.to.code = ValidationUtils.validate_iata(self.to.code)
        except ValueError:
            raise ValueError(IATA_MESSAGE)
        if self.to.date <= self.from_.date:
            raise ValueError(ARRIVAL_MESSAGE)
        return self


class PassengerFields(InputModel):
    fullname: str | None = None
    seat: str | None = None
    passport: str | None = None
    photo_url: str | None = Field(None, alias="photoUrl")

    @field_validator("seat")
    @classmethod
    def normalize_seat(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.upper()
        return None if v == UNASSIGNED_SEAT else v

    @field_validator("passport")
    @classmethod
    def normalize_passport(cls, v: str | None) -> str | None:
        return None if v is None else ValidationUtils.validate_passport(v)


class PassengerCreate(PassengerFields):
    @model_validator(mode="after")
    def require_name(self):
        if not self.fullname:
            raise ValueError("Nom requis")
        return self


class PassengerUpdate(PassengerFields):
    pass


class PassengerOut(CamelRowModel):
    id: int
    fullname: str
    seat: str | None = None
    passport: str | None = None
    photo_url: str | None = None

    @field_validator("seat")
    @classmethod
    def show_unassigned(cls, v: str | None) -> str:
        return v or UNASSIGNED_SEAT


class FlightEndpointOut(BaseModel):
    code: str
    date: datetime | None = None


class FlightOut(CamelRowModel):
    id: int
    code: str
    company: str
    from_: FlightEndpointOut = Field(alias="from")
    to: FlightEndpointOut
    duration: str | None = None
    passengers: list[PassengerOut] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def nest_endpoints(cls, data):
        if isinstance(data, dict) and "from_code" in data:
            data = dict(data)
            data["from"] = {"code": data.pop("from_code"), "date": data.pop("from_date", None)}
            data["to"] = {"code": data.pop("to_code"), "date": data.pop("to_date", None)}
        return data
