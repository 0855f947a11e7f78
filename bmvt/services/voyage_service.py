"""
Voyage service: yearly HAJJ / OUMRAH campaigns, unique per ``(nom, annee)``.
"""

import logging

from bmvt.core.errors import ConflictError, NotFoundError, UniqueViolationError
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.voyage import VoyageCreate
from bmvt.services.common import build_insert, build_update

logger = logging.getLogger(__name__)

VOYAGE_COLUMNS = "id, nom, annee, offres, created_at, updated_at"
DUPLICATE_MESSAGE = "Ce voyage existe déjà pour cette année."
DUPLICATE_UPDATE_MESSAGE = "Un voyage identique existe déjà."


class VoyageService:
    """Service for voyages."""

    def __init__(self, db: QueryExecutor):
        self.db = db

    def list_voyages(self, nom: str | None = None, annee=None) -> list[dict]:
        where: list[str] = []
        args: list = []
        if nom:
            where.append("nom = ?")
            args.append(nom.strip().upper())
        if annee not in (None, ""):
            try:
                args.append(int(annee))
            except (TypeError, ValueError):
                return []
            where.append("annee = ?")

        sql = f"SELECT {VOYAGE_COLUMNS} FROM voyages"
        if where:
            sql += f" WHERE {' AND '.join(where)}"
        return self.db.fetch_all(sql + " ORDER BY annee DESC, nom ASC", args)

    def get_voyage(self, voyage_id: int) -> dict:
        row = self.db.fetch_one(f"SELECT {VOYAGE_COLUMNS} FROM voyages WHERE id = ?", [voyage_id])
        if not row:
            raise NotFoundError("Voyage introuvable")
        return row

    def _exists(self, nom: str, annee: int, exclude_id: int | None = None) -> bool:
        sql = "SELECT id FROM voyages WHERE nom = ? AND annee = ?"
        args: list = [nom, annee]
        if exclude_id is not None:
            sql += " AND id <> ?"
            args.append(exclude_id)
        return self.db.fetch_one(sql, args) is not None

    def create_voyage(self, fields: dict) -> dict:
        data = VoyageCreate.model_validate(fields)
        if self._exists(data.nom, data.annee):
            raise ConflictError(DUPLICATE_MESSAGE)

        sql, args = build_insert("voyages", data.model_dump())
        try:
            result = self.db.execute(sql, args)
            self.db.commit()
        except UniqueViolationError:
            raise ConflictError(DUPLICATE_MESSAGE)

        logger.info(f"Voyage {data.nom} {data.annee} created ({result.insert_id})")
        return self.get_voyage(result.insert_id)

    def update_voyage(self, voyage_id: int, fields: dict) -> dict:
        current = self.get_voyage(voyage_id)
        merged = {key: current[key] for key in ("nom", "annee", "offres")}
        merged.update({k: v for k, v in fields.items() if k in merged and v is not None})
        data = VoyageCreate.model_validate(merged)
        if self._exists(data.nom, data.annee, exclude_id=voyage_id):
            raise ConflictError(DUPLICATE_UPDATE_MESSAGE)

        sql, args = build_update("voyages", data.model_dump(), voyage_id)
        try:
            self.db.execute(sql, args)
            self.db.commit()
        except UniqueViolationError:
            raise ConflictError(DUPLICATE_UPDATE_MESSAGE)
        return self.get_voyage(voyage_id)

    def delete_voyage(self, voyage_id: int) -> None:
        self.get_voyage(voyage_id)
        self.db.execute("DELETE FROM voyages WHERE id = ?", [voyage_id])
        self.db.commit()
