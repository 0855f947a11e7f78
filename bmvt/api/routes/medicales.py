"""
Medical form routes.
"""

from fastapi import APIRouter, Depends, Query, Request

from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.medicale import MedicaleOut
from bmvt.services.medicale_service import MedicaleService

router = APIRouter(prefix="/medicales", tags=["Medicales"])


@router.get("", summary="List Medical Forms")
def list_medicales(
    search: str | None = Query(None),
    limit: str | None = Query(None, description="1 to 500, default 100"),
    offset: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    rows, total = MedicaleService(db).list_medicales(search, limit, offset)
    return list_response(dump_all(MedicaleOut, rows), total)


@router.get("/by-passport", summary="Medical Forms For A Passport")
def find_by_passport(
    passport: str | None = Query(None), db: QueryExecutor = Depends(get_executor)
):
    rows = MedicaleService(db).find_by_passport(passport)
    return success_response({"items": dump_all(MedicaleOut, rows)})


@router.get("/{medicale_id}", summary="Get Medical Form")
def get_medicale(medicale_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(dump(MedicaleOut, MedicaleService(db).get_medicale(medicale_id)))


@router.post("", summary="Create Medical Form")
async def create_medicale(request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    row = MedicaleService(db).create_medicale(fields)
    return created_response({"ok": True, "item": dump(MedicaleOut, row)})


@router.put("/{medicale_id}", summary="Update Medical Form")
async def update_medicale(
    medicale_id: int, request: Request, db: QueryExecutor = Depends(get_executor)
):
    fields, _ = await read_payload(request)
    row = MedicaleService(db).update_medicale(medicale_id, fields)
    return success_response({"ok": True, "item": dump(MedicaleOut, row)})


@router.delete("/{medicale_id}", summary="Delete Medical Form")
def delete_medicale(medicale_id: int, db: QueryExecutor = Depends(get_executor)):
    MedicaleService(db).delete_medicale(medicale_id)
    return message_response("Supprimé")
