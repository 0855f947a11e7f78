"""
Payment routes, with the installment listing used by the payment screen.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from bmvt.core.responses import created_response, list_response
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.paiement import PaymentOut, VersementOut
from bmvt.services.paiement_service import PaiementService

router = APIRouter(prefix="/paiements", tags=["Paiements"])


@router.get(
    "",
    summary="List Payments",
    description="""
**QUERY PARAMETERS:**
- passeport: exact passport
- du / au: payment date bounds (YYYY-MM-DD, inclusive)

Without filters only the latest 1000 payments are returned.
    """,
)
def list_payments(
    passeport: str | None = Query(None),
    du: str | None = Query(None),
    au: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    rows = PaiementService(db).list_payments(passeport, du, au)
    return list_response(dump_all(PaymentOut, rows))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Record Payment")
async def create_payment(request: Request, db: QueryExecutor = Depends(get_executor)):
    """Records a payment under a generated ``PAY-<year>-<6 digits>`` reference."""
    fields, _ = await read_payload(request)
    return created_response(dump(PaymentOut, PaiementService(db).create_payment(fields)))


@router.get("/versements", summary="List Installments")
def list_versements(
    passeport: str | None = Query(None),
    du: str | None = Query(None),
    au: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    rows = PaiementService(db).list_versements(passeport, du, au)
    return list_response(dump_all(VersementOut, rows))


@router.post("/versements", status_code=status.HTTP_201_CREATED, summary="Record Installment")
async def create_versement(request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return created_response(dump(VersementOut, PaiementService(db).create_versement(fields)))
