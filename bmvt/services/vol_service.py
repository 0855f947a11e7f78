"""
Flight service: flights, passenger seating and the passenger CSV export.

Seats are unique per flight regardless of case. The check below runs before
the insert; the ``(flight_id, seat)`` unique constraint settles concurrent
requests that both pass it.
"""

import csv
import io
import logging
from datetime import datetime

from pydantic import TypeAdapter
from starlette.datastructures import UploadFile

from bmvt.core.errors import ConflictError, NotFoundError, UniqueViolationError
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.vol import FlightCreate, FlightOut, PassengerCreate, PassengerOut, PassengerUpdate
from bmvt.services.common import build_insert, build_update, placeholders
from bmvt.services.file_store import FileStore

logger = logging.getLogger(__name__)

FLIGHT_COLUMNS = (
    "id, code, company, from_code, from_date, to_code, to_date, duration, created_at, updated_at"
)
PASSENGER_COLUMNS = "id, fullname, seat, passport, photo_url, flight_id"

FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)

_datetime = TypeAdapter(datetime)


def label_date(value) -> str:
    """``01 juin 2025 à 10:00`` style label for the CSV header."""
    if value is None:
        return ""
    moment = value if isinstance(value, datetime) else _datetime.validate_python(value)
    return f"{moment.day:02d} {FRENCH_MONTHS[moment.month - 1]} {moment.year} à {moment:%H:%M}"


def seat_taken_message(seat: str) -> str:
    return f"Siège {seat} déjà attribué."


class VolService:
    """Service for flights and their passengers."""

    def __init__(self, db: QueryExecutor, files: FileStore | None = None):
        self.db = db
        self.files = files or FileStore("vols")

    # Flights

    def _get_flight_row(self, flight_id: int) -> dict:
        row = self.db.fetch_one(f"SELECT {FLIGHT_COLUMNS} FROM flights WHERE id = ?", [flight_id])
        if not row:
            raise NotFoundError("Vol introuvable")
        return row

    def _passengers_by_flight(self, flight_ids: list[int]) -> dict[int, list[dict]]:
        grouped: dict[int, list[dict]] = {flight_id: [] for flight_id in flight_ids}
        if not flight_ids:
            return grouped
        rows = self.db.fetch_all(
            f"SELECT {PASSENGER_COLUMNS} FROM passengers "
            f"WHERE flight_id IN ({placeholders(flight_ids)}) ORDER BY id ASC",
            flight_ids,
        )
        for row in rows:
            grouped.setdefault(row["flight_id"], []).append(row)
        return grouped

    def _serialize(self, row: dict, passengers: list[dict]) -> dict:
        return dump(FlightOut, {**row, "passengers": passengers})

    def list_flights(self) -> list[dict]:
        rows = self.db.fetch_all(
            f"SELECT {FLIGHT_COLUMNS} FROM flights ORDER BY created_at DESC, id DESC"
        )
        grouped = self._passengers_by_flight([row["id"] for row in rows])
        return [self._serialize(row, grouped.get(row["id"], [])) for row in rows]

    def get_flight(self, flight_id: int) -> dict:
        row = self._get_flight_row(flight_id)
        return self._serialize(row, self._passengers_by_flight([flight_id])[flight_id])

    @staticmethod
    def _flight_values(data: FlightCreate) -> dict:
        return {
            "code": data.code,
            "company": data.company,
            "from_code": data.from_.code,
            "from_date": data.from_.date,
            "to_code": data.to.code,
            "to_date": data.to.date,
            "duration": data.duration,
        }

    def create_flight(self, fields: dict) -> dict:
        data = FlightCreate.model_validate(fields)
        sql, args = build_insert("flights", self._flight_values(data))
        result = self.db.execute(sql, args)
        self.db.commit()
        logger.info(f"Flight {data.code} created ({result.insert_id})")
        return self.get_flight(result.insert_id)

    def update_flight(self, flight_id: int, fields: dict) -> dict:
        """Merge the submitted fields into the stored flight, then validate the whole."""
        current = self._get_flight_row(flight_id)
        merged = {
            "code": current["code"],
            "company": current["company"],
            "duration": current["duration"],
            "from": {"code": current["from_code"], "date": current["from_date"]},
            "to": {"code": current["to_code"], "date": current["to_date"]},
        }
        for key, value in fields.items():
            if key in ("from", "to") and isinstance(value, dict):
                merged[key] = {**merged[key], **{k: v for k, v in value.items() if v not in (None, "")}}
            elif key in ("code", "company", "duration") and value not in (None, ""):
                merged[key] = value

        data = FlightCreate.model_validate(merged)
        sql, args = build_update("flights", self._flight_values(data), flight_id)
        self.db.execute(sql, args)
        self.db.commit()
        return self.get_flight(flight_id)

    def delete_flight(self, flight_id: int) -> None:
        self._get_flight_row(flight_id)
        photos = [
            row["photo_url"]
            for row in self.db.fetch_all(
                "SELECT photo_url FROM passengers WHERE flight_id = ?", [flight_id]
            )
        ]
        with self.db.transaction():
            self.db.execute("DELETE FROM passengers WHERE flight_id = ?", [flight_id])
            self.db.execute("DELETE FROM flights WHERE id = ?", [flight_id])
        self.files.remove_many(photos)
        logger.info(f"Flight {flight_id} deleted with {len(photos)} passengers")

    # Passengers

    def _get_passenger(self, flight_id: int, passenger_id: int) -> dict:
        row = self.db.fetch_one(
            f"SELECT {PASSENGER_COLUMNS} FROM passengers WHERE id = ? AND flight_id = ?",
            [passenger_id, flight_id],
        )
        if not row:
            raise NotFoundError("Passager introuvable")
        return row

    def _ensure_seat_free(self, flight_id: int, seat: str | None, exclude_id: int | None = None) -> None:
        if not seat:
            return
        sql = "SELECT id FROM passengers WHERE flight_id = ? AND UPPER(seat) = ?"
        args: list = [flight_id, seat.upper()]
        if exclude_id is not None:
            sql += " AND id <> ?"
            args.append(exclude_id)
        if self.db.fetch_one(sql, args):
            raise ConflictError(seat_taken_message(seat))

    async def _store_photo(self, files: dict[str, list[UploadFile]]) -> str | None:
        uploads = files.get("photo") or []
        if not uploads:
            return None
        return await self.files.save_upload("photo", uploads[0])

    async def add_passenger(
        self, flight_id: int, fields: dict, files: dict[str, list[UploadFile]]
    ) -> dict:
        data = PassengerCreate.model_validate(fields)
        self._get_flight_row(flight_id)
        self._ensure_seat_free(flight_id, data.seat)

        photo = await self._store_photo(files)
        values = {
            "fullname": data.fullname,
            "seat": data.seat,
            "passport": data.passport,
            "photo_url": photo or data.photo_url,
            "flight_id": flight_id,
        }
        sql, args = build_insert("passengers", values)
        try:
            result = self.db.execute(sql, args)
            self.db.commit()
        except UniqueViolationError:
            self.files.remove(photo)
            raise ConflictError(seat_taken_message(data.seat))
        except Exception:
            self.files.remove(photo)
            raise

        return dump(PassengerOut, self._get_passenger(flight_id, result.insert_id))

    async def update_passenger(
        self, flight_id: int, passenger_id: int, fields: dict, files: dict[str, list[UploadFile]]
    ) -> dict:
        current = self._get_passenger(flight_id, passenger_id)
        changes = PassengerUpdate.model_validate(fields).changes()
        if "seat" in changes:
            self._ensure_seat_free(flight_id, changes["seat"], exclude_id=passenger_id)
        elif str(fields.get("seat", "")).strip() == "—":
            changes["seat"] = None

        photo = await self._store_photo(files)
        if photo:
            changes["photo_url"] = photo

        if changes:
            sql, args = build_update("passengers", changes, passenger_id)
            try:
                self.db.execute(sql, args)
                self.db.commit()
            except UniqueViolationError:
                self.files.remove(photo)
                raise ConflictError(seat_taken_message(changes.get("seat") or ""))
            except Exception:
                self.files.remove(photo)
                raise
            if "photo_url" in changes and current["photo_url"] != changes["photo_url"]:
                self.files.remove(current["photo_url"])

        return dump(PassengerOut, self._get_passenger(flight_id, passenger_id))

    def remove_passenger(self, flight_id: int, passenger_id: int) -> None:
        current = self._get_passenger(flight_id, passenger_id)
        self.db.execute("DELETE FROM passengers WHERE id = ?", [passenger_id])
        self.db.commit()
        self.files.remove(current["photo_url"])

    def list_passengers(self, flight_id: int) -> list[dict]:
        self._get_flight_row(flight_id)
        return dump_all(PassengerOut, self._passengers_by_flight([flight_id])[flight_id])

    # Export

    def export_passengers_csv(self, flight_id: int) -> tuple[str, bytes]:
        """
        Passenger manifest as a UTF-8 CSV with BOM.

        Returns:
            ``(filename, content)``
        """
        flight = self._get_flight_row(flight_id)
        passengers = self._passengers_by_flight([flight_id])[flight_id]

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["Vol", flight["code"]])
        writer.writerow(["Compagnie", flight["company"]])
        writer.writerow(["Départ", f"{flight['from_code']} - {label_date(flight['from_date'])}"])
        writer.writerow(["Arrivée", f"{flight['to_code']} - {label_date(flight['to_date'])}"])
        writer.writerow([])
        writer.writerow(["#", "Nom", "Passeport", "Siège"])
        for index, passenger in enumerate(passengers, start=1):
            writer.writerow(
                [index, passenger["fullname"], passenger["passport"] or "", passenger["seat"] or ""]
            )

        content = "\ufeff" + buffer.getvalue().rstrip("\n")
        return f"passagers_{flight['code']}.csv", content.encode("utf-8")
