"""
Payment and installment service.

Payment references look like ``PAY-<year>-<6 digits>``. The random suffix
can collide; the unique constraint on ``payments.ref`` catches it and the
insert is retried with a fresh reference.
"""

import logging
import secrets
from datetime import date

from bmvt.core.errors import DatabaseError, UniqueViolationError
from bmvt.core.validation import ValidationUtils
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.paiement import PaymentCreate, VersementCreate
from bmvt.services.common import build_insert, clamp_limit

logger = logging.getLogger(__name__)

PAYMENT_COLUMNS = (
    "id, ref, passeport, nom, prenoms, mode, montant, total_du, reduction, date, statut, "
    "created_at, updated_at"
)
VERSEMENT_COLUMNS = (
    "id, passeport, nom, prenoms, echeance, verse, restant, statut, created_at, updated_at"
)

REF_ATTEMPTS = 3
UNFILTERED_LIMIT = 1000


def generate_ref(today: date | None = None) -> str:
    year = (today or date.today()).year
    return f"PAY-{year}-{secrets.randbelow(1_000_000):06d}"


def _date_filters(column: str, passeport: str | None, du: str | None, au: str | None):
    where: list[str] = []
    args: list = []
    passport = ValidationUtils.normalize_passport(passeport)
    if passport:
        where.append("passeport = ?")
        args.append(passport)
    if du:
        where.append(f"{column} >= ?")
        args.append(du.strip())
    if au:
        where.append(f"{column} <= ?")
        args.append(au.strip())
    return where, args


class PaiementService:
    """Service for payments and installments."""

    def __init__(self, db: QueryExecutor):
        self.db = db

    # Payments

    def list_payments(self, passeport=None, du=None, au=None) -> list[dict]:
        where, args = _date_filters("date", passeport, du, au)
        sql = f"SELECT {PAYMENT_COLUMNS} FROM payments"
        if where:
            sql += f" WHERE {' AND '.join(where)}"
        sql += " ORDER BY created_at DESC, id DESC"
        if not where:
            sql += f" LIMIT {UNFILTERED_LIMIT}"
        return self.db.fetch_all(sql, args)

    def create_payment(self, fields: dict) -> dict:
        data = PaymentCreate.model_validate(fields)
        values = data.model_dump()

        for attempt in range(1, REF_ATTEMPTS + 1):
            ref = generate_ref()
            sql, args = build_insert("payments", {"ref": ref, **values})
            try:
                result = self.db.execute(sql, args)
                self.db.commit()
                break
            except UniqueViolationError:
                logger.warning(f"Payment reference collision on {ref} (attempt {attempt})")
        else:
            raise DatabaseError("Impossible de générer une référence de paiement unique.")

        logger.info(f"Payment {ref} recorded for {data.passeport}")
        return self.db.fetch_one(f"SELECT {PAYMENT_COLUMNS} FROM payments WHERE id = ?", [result.insert_id])

    # Installments

    def list_versements(self, passeport=None, du=None, au=None, limit=None) -> list[dict]:
        """
        Installments ordered newest first.

        Without any filter the listing is capped; ``limit`` (default 1000,
        max 5000) applies otherwise.
        """
        where, args = _date_filters("echeance", passeport, du, au)
        sql = f"SELECT {VERSEMENT_COLUMNS} FROM versements"
        if where:
            sql += f" WHERE {' AND '.join(where)}"
        sql += " ORDER BY created_at DESC, id DESC LIMIT ?"
        args.append(clamp_limit(limit, UNFILTERED_LIMIT, 5000))
        return self.db.fetch_all(sql, args)

    def create_versement(self, fields: dict, schema: type[VersementCreate] = VersementCreate) -> dict:
        data = schema.model_validate(fields)
        sql, args = build_insert("versements", data.model_dump())
        result = self.db.execute(sql, args)
        self.db.commit()
        return self.db.fetch_one(
            f"SELECT {VERSEMENT_COLUMNS} FROM versements WHERE id = ?", [result.insert_id]
        )
