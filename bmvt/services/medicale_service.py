"""
Medical form service.

Each form is linked to a pilgrim by passport on a best-effort basis: the
link is resolved at write time and left NULL when no pilgrim matches.
"""

import logging

from bmvt.core.errors import NotFoundError
from bmvt.core.validation import ValidationUtils
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.medicale import MedicaleCreate, MedicaleUpdate
from bmvt.services.common import build_insert, build_update, clamp_limit, like_pattern, parse_offset

logger = logging.getLogger(__name__)

MEDICALE_COLUMNS = """
    id, pelerin_id, numero_cmah, passeport, nom, prenoms, pouls,
    carnet_vaccins, groupe_sanguin, covid, poids, tension, vulnerabilite,
    diabete, maladie_cardiaque, analyse_psychiatrique, accompagnements,
    examen_paraclinique, antecedents, created_at, updated_at
"""

SEARCH_COLUMNS = ("passeport", "nom", "prenoms", "numero_cmah")


class MedicaleService:
    """Service for medical forms."""

    def __init__(self, db: QueryExecutor):
        self.db = db

    def _resolve_pelerin_id(self, passport: str) -> int | None:
        row = self.db.fetch_one(
            "SELECT id FROM pelerins WHERE UPPER(num_passeport) = ? ORDER BY id LIMIT 1", [passport]
        )
        return row["id"] if row else None

    def get_medicale(self, medicale_id: int) -> dict:
        row = self.db.fetch_one(f"SELECT {MEDICALE_COLUMNS} FROM medicales WHERE id = ?", [medicale_id])
        if not row:
            raise NotFoundError("Dossier médical introuvable")
        return row

    def list_medicales(self, search: str | None = None, limit=None, offset=None) -> tuple[list[dict], int]:
        where = ""
        args: list = []
        if search:
            where = " WHERE " + " OR ".join(f"{column} LIKE ?" for column in SEARCH_COLUMNS)
            args = [like_pattern(search)] * len(SEARCH_COLUMNS)

        total = self.db.execute(f"SELECT COUNT(*) AS total FROM medicales{where}", args).scalar()
        rows = self.db.fetch_all(
            f"SELECT {MEDICALE_COLUMNS} FROM medicales{where} "
            "ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            args + [clamp_limit(limit, 100, 500), parse_offset(offset)],
        )
        return rows, int(total or 0)

    def find_by_passport(self, passport: str | None) -> list[dict]:
        term = ValidationUtils.normalize_passport(passport)
        if not term:
            return []
        return self.db.fetch_all(
            f"SELECT {MEDICALE_COLUMNS} FROM medicales WHERE UPPER(passeport) = ? "
            "ORDER BY created_at DESC, id DESC",
            [term],
        )

    def create_medicale(self, fields: dict) -> dict:
        data = MedicaleCreate.model_validate(fields)
        values = data.model_dump()
        values["pelerin_id"] = self._resolve_pelerin_id(data.passeport)

        sql, args = build_insert("medicales", values)
        result = self.db.execute(sql, args)
        self.db.commit()
        logger.info(f"Medical form {result.insert_id} created for {data.passeport}")
        return self.get_medicale(result.insert_id)

    def update_medicale(self, medicale_id: int, fields: dict) -> dict:
        self.get_medicale(medicale_id)
        changes = MedicaleUpdate.model_validate(fields).changes()
        if "passeport" in changes:
            changes["pelerin_id"] = self._resolve_pelerin_id(changes["passeport"])
        if changes:
            sql, args = build_update("medicales", changes, medicale_id)
            self.db.execute(sql, args)
            self.db.commit()
        return self.get_medicale(medicale_id)

    def delete_medicale(self, medicale_id: int) -> None:
        self.get_medicale(medicale_id)
        self.db.execute("DELETE FROM medicales WHERE id = ?", [medicale_id])
        self.db.commit()
