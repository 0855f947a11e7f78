"""
Internal chat routes: channels, the server-sent event stream and messages.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse

from bmvt.core.dependencies import get_optional_identity
from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.security import Identity
from bmvt.core.validation import read_payload
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.services.chat_broadcaster import CHANNELS, broadcaster
from bmvt.services.chat_service import ChatService

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.get("/channels", summary="List Channels")
def list_channels():
    return success_response({"channels": CHANNELS})


@router.get(
    "/stream",
    summary="Channel Event Stream",
    description="""
Server-sent events for one channel.

**EVENTS:**
- `ready` once connected
- `ping` every heartbeat interval
- unnamed `data:` frames with `{"type": "message:new" | "message:update", "item": ...}`
  or `{"type": "message:delete", "id": ...}`
    """,
)
async def stream(request: Request, channel: str | None = Query(None)):
    name = broadcaster.validate_channel(channel)
    return StreamingResponse(
        broadcaster.stream(name, request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
    )


@router.get("/messages", summary="List Messages")
def list_messages(
    channel: str | None = Query(None),
    limit: str | None = Query(None, description="Default 50, max 200"),
    after_id: str | None = Query(None, alias="afterId"),
    search: str | None = Query(None),
    db: QueryExecutor = Depends(get_executor),
):
    """Latest live messages of a channel, oldest first."""
    return list_response(ChatService(db).list_messages(channel, limit, after_id, search))


@router.get("/messages/{message_id}", summary="Get Message")
def get_message(message_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(ChatService(db).get_message(message_id))


@router.post(
    "/messages",
    status_code=status.HTTP_201_CREATED,
    summary="Post Message",
    description=(
        "JSON or multipart with up to 10 `files[]`. Needs text or at least one file. "
        "`authorName` defaults to the caller's e-mail when a token is sent."
    ),
)
async def create_message(
    request: Request,
    caller: Identity | None = Depends(get_optional_identity),
    db: QueryExecutor = Depends(get_executor),
):
    fields, files = await read_payload(request)
    item = await ChatService(db).create_message(fields, files, caller)
    return created_response({"item": item})


@router.put("/messages/{message_id}", summary="Edit Message")
async def update_message(message_id: int, request: Request, db: QueryExecutor = Depends(get_executor)):
    """New files are appended unless ``replaceAttachments=true``."""
    fields, files = await read_payload(request)
    item = await ChatService(db).update_message(message_id, fields, files)
    return message_response("Mise à jour effectuée", item=item)


@router.delete("/messages/{message_id}", summary="Delete Message")
async def delete_message(message_id: int, db: QueryExecutor = Depends(get_executor)):
    affected = ChatService(db).delete_message(message_id)
    return message_response("Supprimé", affectedRows=affected)
