"""
Hotel room routes: rooms and their occupants.
"""

from fastapi import APIRouter, Depends, Request, status

from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.services.chambre_service import ChambreService

router = APIRouter(prefix="/chambres", tags=["Chambres"])


@router.get("", summary="List Rooms")
def list_rooms(db: QueryExecutor = Depends(get_executor)):
    return list_response(ChambreService(db).list_rooms())


@router.get("/{room_id}", summary="Get Room")
def get_room(room_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(ChambreService(db).get_room(room_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Room")
async def create_room(request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return created_response(ChambreService(db).create_room(fields))


@router.put("/{room_id}", summary="Update Room")
async def update_room(room_id: int, request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return success_response(ChambreService(db).update_room(room_id, fields))


@router.delete("/{room_id}", summary="Delete Room")
def delete_room(room_id: int, db: QueryExecutor = Depends(get_executor)):
    ChambreService(db).delete_room(room_id)
    return message_response("Supprimé")


@router.post(
    "/{room_id}/occupants",
    status_code=status.HTTP_201_CREATED,
    summary="Add Occupant",
    description="JSON or multipart with an optional `photo` file. Rejected with 409 when the room is full.",
)
async def add_occupant(room_id: int, request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, files = await read_payload(request)
    return created_response(await ChambreService(db).add_occupant(room_id, fields, files))


@router.delete("/{room_id}/occupants/{occupant_id}", summary="Remove Occupant")
def remove_occupant(room_id: int, occupant_id: int, db: QueryExecutor = Depends(get_executor)):
    ChambreService(db).remove_occupant(room_id, occupant_id)
    return message_response("Retiré")
