"""
Standalone installment routes.

Same table as ``/paiements/versements``, with stricter amount checks on
create and a ``limit`` on listings.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from bmvt.core.responses import created_response, list_response
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.paiement import StrictVersementCreate, VersementOut
from bmvt.services.paiement_service import PaiementService

router = APIRouter(prefix="/versements", tags=["Versements"])


@router.get("", summary="List Installments")
def list_versements(
    passeport: str | None = Query(None),
    du: str | None = Query(None),
    au: str | None = Query(None),
    limit: str | None = Query(None, description="Default 1000, max 5000"),
    db: QueryExecutor = Depends(get_executor),
):
    rows = PaiementService(db).list_versements(passeport, du, au, limit)
    return list_response(dump_all(VersementOut, rows))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Record Installment")
async def create_versement(request: Request, db: QueryExecutor = Depends(get_executor)):
    """``verse`` must be positive and ``restant`` non-negative."""
    fields, _ = await read_payload(request)
    row = PaiementService(db).create_versement(fields, schema=StrictVersementCreate)
    return created_response(dump(VersementOut, row))
