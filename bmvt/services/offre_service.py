"""
Offer service.
"""

import logging

from bmvt.core.errors import NotFoundError
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.offre import OffreCreate
from bmvt.services.common import build_insert, build_update, like_pattern

logger = logging.getLogger(__name__)

OFFRE_COLUMNS = "id, nom, prix, hotel, date_depart, date_arrivee, created_at, updated_at"
EDITABLE_FIELDS = ("nom", "prix", "hotel", "date_depart", "date_arrivee")
CAMEL_FIELDS = {"dateDepart": "date_depart", "dateArrivee": "date_arrivee"}


class OffreService:
    """Service for travel offers."""

    def __init__(self, db: QueryExecutor):
        self.db = db

    def list_offres(self, search: str | None = None) -> list[dict]:
        sql = f"SELECT {OFFRE_COLUMNS} FROM offres"
        args: list = []
        if search:
            sql += " WHERE nom LIKE ? OR hotel LIKE ?"
            args = [like_pattern(search)] * 2
        return self.db.fetch_all(sql + " ORDER BY created_at DESC, id DESC", args)

    def get_offre(self, offre_id: int) -> dict:
        row = self.db.fetch_one(f"SELECT {OFFRE_COLUMNS} FROM offres WHERE id = ?", [offre_id])
        if not row:
            raise NotFoundError("Offre introuvable")
        return row

    def create_offre(self, fields: dict) -> dict:
        data = OffreCreate.model_validate(fields)
        sql, args = build_insert("offres", data.model_dump())
        result = self.db.execute(sql, args)
        self.db.commit()
        logger.info(f"Offer {data.nom} created ({result.insert_id})")
        return self.get_offre(result.insert_id)

    def update_offre(self, offre_id: int, fields: dict) -> dict:
        """Apply the submitted fields over the stored offer and revalidate."""
        current = self.get_offre(offre_id)
        merged = {key: current[key] for key in EDITABLE_FIELDS}
        for key, value in fields.items():
            column = CAMEL_FIELDS.get(key, key)
            if column in merged and value not in (None, ""):
                merged[column] = value
        data = OffreCreate.model_validate(merged)

        sql, args = build_update("offres", data.model_dump(), offre_id)
        self.db.execute(sql, args)
        self.db.commit()
        return self.get_offre(offre_id)

    def delete_offre(self, offre_id: int) -> None:
        self.get_offre(offre_id)
        self.db.execute("DELETE FROM offres WHERE id = ?", [offre_id])
        self.db.commit()
