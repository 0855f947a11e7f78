"""
Travel offer routes.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.offre import OffreOut
from bmvt.services.offre_service import OffreService

router = APIRouter(prefix="/offres", tags=["Offres"])


@router.get("", summary="List Offers")
def list_offres(
    search: str | None = Query(None, description="Match on name or hotel"),
    db: QueryExecutor = Depends(get_executor),
):
    return list_response(dump_all(OffreOut, OffreService(db).list_offres(search)))


@router.get("/{offre_id}", summary="Get Offer")
def get_offre(offre_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(dump(OffreOut, OffreService(db).get_offre(offre_id)))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Offer")
async def create_offre(request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return created_response(dump(OffreOut, OffreService(db).create_offre(fields)))


@router.put("/{offre_id}", summary="Update Offer")
async def update_offre(offre_id: int, request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return success_response(dump(OffreOut, OffreService(db).update_offre(offre_id, fields)))


@router.delete("/{offre_id}", summary="Delete Offer")
def delete_offre(offre_id: int, db: QueryExecutor = Depends(get_executor)):
    OffreService(db).delete_offre(offre_id)
    return message_response("Supprimé")
