"""
Flight routes: flights, their passengers and the passenger CSV export.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response

from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.services.vol_service import VolService

router = APIRouter(prefix="/vols", tags=["Vols"])


@router.get("", summary="List Flights")
def list_flights(db: QueryExecutor = Depends(get_executor)):
    """Flights, newest first, each with its passengers."""
    return list_response(VolService(db).list_flights())


@router.get("/{flight_id}", summary="Get Flight")
def get_flight(flight_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(VolService(db).get_flight(flight_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Flight",
    description="""
**BODY:**
```
{"code": "SV123", "company": "Saudia",
 "from": {"code": "DSS", "date": "2025-06-01T10:00:00Z"},
 "to": {"code": "JED", "date": "2025-06-01T16:00:00Z"},
 "duration": "6h"}
```
Airport codes are 3-letter IATA codes; arrival must be after departure.
    """,
)
async def create_flight(request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return created_response(VolService(db).create_flight(fields))


@router.put("/{flight_id}", summary="Update Flight")
async def update_flight(flight_id: int, request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, _ = await read_payload(request)
    return success_response(VolService(db).update_flight(flight_id, fields))


@router.delete("/{flight_id}", summary="Delete Flight")
def delete_flight(flight_id: int, db: QueryExecutor = Depends(get_executor)):
    """Deletes the flight, its passengers and their photos."""
    VolService(db).delete_flight(flight_id)
    return message_response("Supprimé")


@router.get("/{flight_id}/passagers", summary="List Passengers")
def list_passengers(flight_id: int, db: QueryExecutor = Depends(get_executor)):
    return list_response(VolService(db).list_passengers(flight_id))


@router.post(
    "/{flight_id}/passagers",
    status_code=status.HTTP_201_CREATED,
    summary="Add Passenger",
    description="JSON or multipart with an optional `photo` file. Seats are unique per flight.",
)
async def add_passenger(flight_id: int, request: Request, db: QueryExecutor = Depends(get_executor)):
    fields, files = await read_payload(request)
    return created_response(await VolService(db).add_passenger(flight_id, fields, files))


@router.put("/{flight_id}/passagers/{passenger_id}", summary="Update Passenger")
async def update_passenger(
    flight_id: int, passenger_id: int, request: Request, db: QueryExecutor = Depends(get_executor)
):
    fields, files = await read_payload(request)
    item = await VolService(db).update_passenger(flight_id, passenger_id, fields, files)
    return success_response(item)


@router.delete("/{flight_id}/passagers/{passenger_id}", summary="Remove Passenger")
def remove_passenger(flight_id: int, passenger_id: int, db: QueryExecutor = Depends(get_executor)):
    VolService(db).remove_passenger(flight_id, passenger_id)
    return message_response("Retiré")


@router.get("/{flight_id}/export.csv", summary="Export Passengers (CSV)")
def export_passengers(flight_id: int, db: QueryExecutor = Depends(get_executor)):
    filename, content = VolService(db).export_passengers_csv(flight_id)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
