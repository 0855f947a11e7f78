"""
Pilgrim record routes.

Create and update accept multipart forms (with ``photoPelerin`` and
``photoPasseport`` files) as well as JSON bodies.
"""

from fastapi import APIRouter, Depends, Query, Request

from bmvt.core.dependencies import get_optional_identity
from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.security import Identity
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.pelerin import PelerinOut
from bmvt.services.pelerin_service import PelerinService

router = APIRouter(prefix="/pelerins", tags=["Pelerins"])


@router.get(
    "",
    summary="List Pilgrims",
    description="""
**QUERY PARAMETERS:**
- search: matches name, first names, passport, contact and creator
- limit (default 100, max 1000)
- offset (default 0)
    """,
)
def list_pelerins(
    search: str | None = Query(None),
    limit: str | None = Query(None),
    offset: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    rows, total = PelerinService(db).list_pelerins(search, limit, offset)
    return list_response(dump_all(PelerinOut, rows), total)


@router.get("/by-passport", summary="Find Pilgrims By Passport")
def find_by_passport(
    passport: str | None = Query(None, description="Full or partial passport number"),
    db: QueryExecutor = Depends(get_executor),
):
    return list_response(dump_all(PelerinOut, PelerinService(db).find_by_passport(passport)))


@router.get("/{pelerin_id}", summary="Get Pilgrim")
def get_pelerin(pelerin_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(dump(PelerinOut, PelerinService(db).get_pelerin(pelerin_id)))


@router.post("", summary="Create Pilgrim")
async def create_pelerin(
    request: Request,
    caller: Identity | None = Depends(get_optional_identity),
    db: QueryExecutor = Depends(get_executor),
):
    fields, files = await read_payload(request)
    row = await PelerinService(db).create_pelerin(fields, files, caller)
    return created_response({"message": "Pèlerin enregistré.", "item": dump(PelerinOut, row)})


@router.put("/{pelerin_id}", summary="Update Pilgrim")
async def update_pelerin(
    pelerin_id: int, request: Request, db: QueryExecutor = Depends(get_executor)
):
    """Partial update; keys may be snake_case or camelCase."""
    fields, files = await read_payload(request)
    row = await PelerinService(db).update_pelerin(pelerin_id, fields, files)
    return message_response("Mise à jour effectuée", item=dump(PelerinOut, row))


@router.delete("/{pelerin_id}", summary="Delete Pilgrim")
def delete_pelerin(pelerin_id: int, db: QueryExecutor = Depends(get_executor)):
    PelerinService(db).delete_pelerin(pelerin_id)
    return message_response("Supprimé")
