"""
Joined pilgrim + payment view.
"""

from fastapi import APIRouter, Depends, Query, Request

from bmvt.core.responses import success_response
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.services.pelerin_paiement_service import PelerinPaiementService

router = APIRouter(prefix="/pelerinspaiement", tags=["Pelerins Paiement"])


@router.get(
    "",
    summary="Pilgrims With Payments",
    description="""
**QUERY PARAMETERS:**
- search: matches name, first names, passport, contact and creator
- offre: offer name, `TOUTES` for all offers
- limit (default 300, max 1000)

**RESPONSE:** `{pelerins, payments}` where payments belong to the listed pilgrims.
    """,
)
def overview(
    request: Request,
    search: str | None = Query(None),
    offre: str | None = Query(None),
    limit: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    data = PelerinPaiementService(db).overview(str(request.base_url), search, offre, limit)
    return success_response(data)


@router.get("/by-passport", summary="Pilgrim And Payments By Passport")
def by_passport(
    request: Request,
    passport: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    return success_response(PelerinPaiementService(db).by_passport(str(request.base_url), passport))
