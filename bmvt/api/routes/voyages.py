"""
Voyage routes (HAJJ / OUMRAH campaigns).
"""

from fastapi import APIRouter, Depends, Query, Request, status

from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.voyage import VoyageOut
from bmvt.services.voyage_service import VoyageService

router = APIRouter(prefix="/voyages", tags=["Voyages"])


@router.get("", summary="List Voyages")
def list_voyages(
    nom: str | None = Query(None, description="HAJJ or OUMRAH"),
    annee: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    return list_response(dump_all(VoyageOut, VoyageService(db).list_voyages(nom, annee)))


@router.get("/{voyage_id}", summary="Get Voyage")
def get_voyage(voyage_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(dump(VoyageOut, VoyageService(db).get_voyage(voyage_id)))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Voyage",
    description="`nom` is HAJJ or OUMRAH (any case), `annee` 2000 to 2100. 409 on a duplicate pair.",
)
async def create_voyage(request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return created_response(dump(VoyageOut, VoyageService(db).create_voyage(fields)))


@router.put("/{voyage_id}", summary="Update Voyage")
async def update_voyage(voyage_id: int, request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return success_response(dump(VoyageOut, VoyageService(db).update_voyage(voyage_id, fields)))


@router.delete("/{voyage_id}", summary="Delete Voyage")
def delete_voyage(voyage_id: int, db: QueryExecutor = Depends(get_executor)):
    VoyageService(db).delete_voyage(voyage_id)
    return message_response("Supprimé")
