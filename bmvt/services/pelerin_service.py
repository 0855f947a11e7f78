"""
Pilgrim record service.

Pilgrims own two optional photos kept in the ``pelerins`` file store.
Superseded or orphaned photos are removed after the database write commits.
"""

import logging
from pathlib import Path

from starlette.datastructures import UploadFile

from bmvt.core.config import settings
from bmvt.core.errors import NotFoundError, ValidationError
from bmvt.core.security import Identity
from bmvt.core.validation import ValidationUtils
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.pelerin import PelerinCreate, PelerinUpdate
from bmvt.services.common import (
    build_insert,
    build_update,
    clamp_limit,
    like_pattern,
    parse_offset,
    parse_optional_int,
)
from bmvt.services.file_store import FileStore

logger = logging.getLogger(__name__)

PELERIN_COLUMNS = """
    id, photo_pelerin_path, photo_passeport_path,
    nom, prenoms, date_naissance, lieu_naissance, sexe,
    adresse, contact, num_passeport, offre, voyage, annee_voyage,
    ur_nom, ur_prenoms, ur_contact, ur_residence,
    created_by_name, created_by_id, created_at, updated_at
"""

# form field -> column
PHOTO_FIELDS = {
    "photoPelerin": "photo_pelerin_path",
    "photoPasseport": "photo_passeport_path",
}

SEARCH_COLUMNS = ("nom", "prenoms", "num_passeport", "contact", "created_by_name")


class PelerinService:
    """Service for pilgrim records."""

    def __init__(self, db: QueryExecutor, files: FileStore | None = None):
        self.db = db
        self.files = files or FileStore("pelerins")

    def get_pelerin(self, pelerin_id: int) -> dict:
        row = self.db.fetch_one(f"SELECT {PELERIN_COLUMNS} FROM pelerins WHERE id = ?", [pelerin_id])
        if not row:
            raise NotFoundError("Pèlerin introuvable")
        return row

    def list_pelerins(self, search: str | None = None, limit=None, offset=None) -> tuple[list[dict], int]:
        where = ""
        args: list = []
        if search:
            where = " WHERE " + " OR ".join(f"{column} LIKE ?" for column in SEARCH_COLUMNS)
            args = [like_pattern(search)] * len(SEARCH_COLUMNS)

        total = self.db.execute(f"SELECT COUNT(*) AS total FROM pelerins{where}", args).scalar()
        rows = self.db.fetch_all(
            f"SELECT {PELERIN_COLUMNS} FROM pelerins{where} "
            "ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            args + [clamp_limit(limit, 100, 1000), parse_offset(offset)],
        )
        return rows, int(total or 0)

    def find_by_passport(self, passport: str | None) -> list[dict]:
        term = ValidationUtils.normalize_passport(passport)
        if not term:
            raise ValidationError("Paramètre 'passport' requis.")
        return self.db.fetch_all(
            f"SELECT {PELERIN_COLUMNS} FROM pelerins WHERE UPPER(num_passeport) LIKE ? "
            "ORDER BY created_at DESC, id DESC LIMIT 10",
            [like_pattern(term)],
        )

    async def _store_photos(self, files: dict[str, list[UploadFile]]) -> dict[str, str]:
        stored: dict[str, str] = {}
        try:
            for field, column in PHOTO_FIELDS.items():
                uploads = files.get(field) or []
                if not uploads:
                    continue
                upload = uploads[0]
                ext = Path(upload.filename or "").suffix.lower()
                if ext not in settings.allowed_image_extensions:
                    raise ValidationError(f"Format d'image non supporté ({ext or 'inconnu'}).")
                stored[column] = await self.files.save_upload(field, upload)
        except Exception:
            self.files.remove_many(stored.values())
            raise
        return stored

    async def create_pelerin(
        self, fields: dict, files: dict[str, list[UploadFile]], caller: Identity | None = None
    ) -> dict:
        """Creator fields come from the caller when authenticated, else from the form."""
        data = PelerinCreate.model_validate(fields)
        photos = await self._store_photos(files)

        values = data.model_dump()
        values.update(photos)
        values["created_by_name"] = caller.email if caller else fields.get("createdByName")
        values["created_by_id"] = caller.id if caller else parse_optional_int(fields.get("createdById"))

        sql, args = build_insert("pelerins", values)
        try:
            result = self.db.execute(sql, args)
            self.db.commit()
        except Exception:
            self.files.remove_many(photos.values())
            raise

        logger.info(f"Pilgrim {result.insert_id} created by {values['created_by_name'] or 'anonymous'}")
        return self.get_pelerin(result.insert_id)

    async def update_pelerin(
        self, pelerin_id: int, fields: dict, files: dict[str, list[UploadFile]]
    ) -> dict:
        current = self.get_pelerin(pelerin_id)
        changes = PelerinUpdate.model_validate(fields).changes()
        photos = await self._store_photos(files)
        changes.update(photos)

        if not changes:
            raise ValidationError("Aucun champ à mettre à jour.")

        sql, args = build_update("pelerins", changes, pelerin_id)
        try:
            self.db.execute(sql, args)
            self.db.commit()
        except Exception:
            self.files.remove_many(photos.values())
            raise

        for column in photos:
            self.files.remove(current.get(column))
        return self.get_pelerin(pelerin_id)

    def delete_pelerin(self, pelerin_id: int) -> None:
        current = self.get_pelerin(pelerin_id)
        self.db.execute("DELETE FROM pelerins WHERE id = ?", [pelerin_id])
        self.db.commit()
        self.files.remove_many(current.get(column) for column in PHOTO_FIELDS.values())
        logger.info(f"Pilgrim {pelerin_id} deleted")
