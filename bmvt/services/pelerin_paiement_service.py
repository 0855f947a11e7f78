"""
Joined pilgrim + payment view used by the payment screen.

Payments are matched to pilgrims by passport; the offer price is looked up
by offer name.
"""

from bmvt.core.errors import ValidationError
from bmvt.core.validation import ValidationUtils
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.paiement import PaymentOut
from bmvt.schemas.pelerin_paiement import PelerinSummary
from bmvt.services.common import clamp_limit, like_pattern, placeholders
from bmvt.services.paiement_service import PAYMENT_COLUMNS

SUMMARY_COLUMNS = """
    p.id, p.nom, p.prenoms, p.num_passeport, p.offre, p.contact,
    p.photo_pelerin_path, p.photo_passeport_path,
    (SELECT MAX(o.prix) FROM offres o WHERE o.nom = p.offre) AS prix_offre
"""

SEARCH_COLUMNS = ("nom", "prenoms", "num_passeport", "contact", "created_by_name")
ALL_OFFERS = "TOUTES"


def public_url(base_url: str, value: str | None) -> str | None:
    """Absolute URL for a stored photo path; absolute URLs pass through."""
    if not value:
        return None
    if value.startswith(("http://", "https://")):
        return value
    base = base_url.rstrip("/")
    return f"{base}{value}" if value.startswith("/") else f"{base}/{value}"


class PelerinPaiementService:
    def __init__(self, db: QueryExecutor):
        self.db = db

    def _summary(self, row: dict, base_url: str) -> dict:
        item = dump(PelerinSummary, row)
        item["photoPelerin"] = public_url(base_url, item["photoPelerin"])
        item["photoPasseport"] = public_url(base_url, item["photoPasseport"])
        return item

    def _payments_for(self, passports: list[str]) -> list[dict]:
        if not passports:
            return []
        rows = self.db.fetch_all(
            f"SELECT {PAYMENT_COLUMNS} FROM payments "
            f"WHERE passeport IN ({placeholders(passports)}) ORDER BY id DESC",
            passports,
        )
        return dump_all(PaymentOut, rows)

    def overview(self, base_url: str, search: str | None = None, offre: str | None = None, limit=None) -> dict:
        where: list[str] = []
        args: list = []
        if search:
            where.append("(" + " OR ".join(f"p.{column} LIKE ?" for column in SEARCH_COLUMNS) + ")")
            args.extend([like_pattern(search)] * len(SEARCH_COLUMNS))
        if offre and offre.strip().upper() != ALL_OFFERS:
            where.append("p.offre = ?")
            args.append(offre.strip())

        sql = f"SELECT {SUMMARY_COLUMNS} FROM pelerins p"
        if where:
            sql += f" WHERE {' AND '.join(where)}"
        sql += " ORDER BY p.id DESC LIMIT ?"
        args.append(clamp_limit(limit, 300, 1000))

        pelerins = [self._summary(row, base_url) for row in self.db.fetch_all(sql, args)]
        passports = sorted({item["passeport"] for item in pelerins if item["passeport"]})
        return {"pelerins": pelerins, "payments": self._payments_for(passports)}

    def by_passport(self, base_url: str, passport: str | None) -> dict:
        term = ValidationUtils.normalize_passport(passport)
        if not term:
            raise ValidationError("Paramètre 'passport' requis.")

        row = self.db.fetch_one(
            f"SELECT {SUMMARY_COLUMNS} FROM pelerins p WHERE UPPER(p.num_passeport) = ? "
            "ORDER BY p.id DESC LIMIT 1",
            [term],
        )
        return {
            "pelerin": self._summary(row, base_url) if row else None,
            "payments": self._payments_for([term]),
        }
