"""
Room service: hotel rooms and their occupants.
"""

import logging

from starlette.datastructures import UploadFile

from bmvt.core.errors import ConflictError, NotFoundError
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.chambre import OccupantCreate, OccupantOut, RoomCreate, RoomOut
from bmvt.schemas.common import dump
from bmvt.services.common import build_insert, build_update, placeholders
from bmvt.services.file_store import FileStore

logger = logging.getLogger(__name__)

ROOM_COLUMNS = "id, hotel, city, type, capacity, created_at, updated_at"
OCCUPANT_COLUMNS = "id, name, passport, photo_url, room_id"


class ChambreService:
    """Service for rooms and occupants."""

    def __init__(self, db: QueryExecutor, files: FileStore | None = None):
        self.db = db
        self.files = files or FileStore("chambres")

    def _get_room_row(self, room_id: int) -> dict:
        row = self.db.fetch_one(f"SELECT {ROOM_COLUMNS} FROM rooms WHERE id = ?", [room_id])
        if not row:
            raise NotFoundError("Chambre introuvable")
        return row

    def _occupants_by_room(self, room_ids: list[int]) -> dict[int, list[dict]]:
        grouped: dict[int, list[dict]] = {room_id: [] for room_id in room_ids}
        if not room_ids:
            return grouped
        rows = self.db.fetch_all(
            f"SELECT {OCCUPANT_COLUMNS} FROM room_occupants "
            f"WHERE room_id IN ({placeholders(room_ids)}) ORDER BY id ASC",
            room_ids,
        )
        for row in rows:
            grouped.setdefault(row["room_id"], []).append(row)
        return grouped

    def list_rooms(self) -> list[dict]:
        rows = self.db.fetch_all(f"SELECT {ROOM_COLUMNS} FROM rooms ORDER BY created_at DESC, id DESC")
        grouped = self._occupants_by_room([row["id"] for row in rows])
        return [dump(RoomOut, {**row, "occupants": grouped.get(row["id"], [])}) for row in rows]

    def get_room(self, room_id: int) -> dict:
        row = self._get_room_row(room_id)
        return dump(RoomOut, {**row, "occupants": self._occupants_by_room([room_id])[room_id]})

    def create_room(self, fields: dict) -> dict:
        data = RoomCreate.model_validate(fields)
        sql, args = build_insert("rooms", data.model_dump())
        result = self.db.execute(sql, args)
        self.db.commit()
        return self.get_room(result.insert_id)

    def update_room(self, room_id: int, fields: dict) -> dict:
        current = self._get_room_row(room_id)
        merged = {key: current[key] for key in ("hotel", "city", "type", "capacity")}
        merged.update({k: v for k, v in fields.items() if k in merged and v not in (None, "")})
        data = RoomCreate.model_validate(merged)

        sql, args = build_update("rooms", data.model_dump(), room_id)
        self.db.execute(sql, args)
        self.db.commit()
        return self.get_room(room_id)

    def delete_room(self, room_id: int) -> None:
        self._get_room_row(room_id)
        photos = [
            row["photo_url"]
            for row in self.db.fetch_all(
                "SELECT photo_url FROM room_occupants WHERE room_id = ?", [room_id]
            )
        ]
        with self.db.transaction():
            self.db.execute("DELETE FROM room_occupants WHERE room_id = ?", [room_id])
            self.db.execute("DELETE FROM rooms WHERE id = ?", [room_id])
        self.files.remove_many(photos)
        logger.info(f"Room {room_id} deleted with {len(photos)} occupants")

    async def add_occupant(
        self, room_id: int, fields: dict, files: dict[str, list[UploadFile]]
    ) -> dict:
        data = OccupantCreate.model_validate(fields)
        room = self._get_room_row(room_id)

        count = self.db.execute(
            "SELECT COUNT(*) AS total FROM room_occupants WHERE room_id = ?", [room_id]
        ).scalar()
        if int(count or 0) >= int(room["capacity"]):
            raise ConflictError("Chambre complète.")

        uploads = files.get("photo") or []
        photo = await self.files.save_upload("photo", uploads[0]) if uploads else None

        sql, args = build_insert(
            "room_occupants",
            {
                "name": data.name,
                "passport": data.passport,
                "photo_url": photo or data.photo_url,
                "room_id": room_id,
            },
        )
        try:
            result = self.db.execute(sql, args)
            self.db.commit()
        except Exception:
            self.files.remove(photo)
            raise

        row = self.db.fetch_one(
            f"SELECT {OCCUPANT_COLUMNS} FROM room_occupants WHERE id = ?", [result.insert_id]
        )
        return dump(OccupantOut, row)

    def remove_occupant(self, room_id: int, occupant_id: int) -> None:
        row = self.db.fetch_one(
            f"SELECT {OCCUPANT_COLUMNS} FROM room_occupants WHERE id = ? AND room_id = ?",
            [occupant_id, room_id],
        )
        if not row:
            raise NotFoundError("Occupant introuvable")
        self.db.execute("DELETE FROM room_occupants WHERE id = ?", [occupant_id])
        self.db.commit()
        self.files.remove(row["photo_url"])
