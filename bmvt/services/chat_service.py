"""
Chat message service.

Messages are persisted first, then announced on the channel's event streams.
Deletion is soft: the row stays with ``deleted_at`` set and its attachments
cleared, and the attachment files are removed once the update commits.
"""

import json
import logging
from pathlib import Path

from starlette.datastructures import UploadFile

from bmvt.core.config import settings
from bmvt.core.errors import NotFoundError, ValidationError
from bmvt.core.security import Identity
from bmvt.core.validation import parse_bool
from bmvt.db.executor import QueryExecutor
from bmvt.schemas.chat import ChatMessageCreate, ChatMessageOut, parse_attachments_json
from bmvt.schemas.common import dump, dump_all
from bmvt.services.chat_broadcaster import ChatBroadcaster, broadcaster
from bmvt.services.common import clamp_limit, like_pattern
from bmvt.services.file_store import FileStore

logger = logging.getLogger(__name__)

MESSAGE_COLUMNS = """
    id, channel, author_id, author_name, text, reply_to_id,
    attachments_json, edited_at, deleted_at, created_at, updated_at
"""


def attachment_type(content_type: str | None) -> str:
    mime = (content_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    return "file"


def encode_attachments(attachments: list[dict]) -> str | None:
    return json.dumps(attachments, ensure_ascii=False) if attachments else None


class ChatService:
    """Service for chat messages."""

    def __init__(
        self,
        db: QueryExecutor,
        files: FileStore | None = None,
        events: ChatBroadcaster | None = None,
    ):
        self.db = db
        self.files = files or FileStore("chat")
        self.events = events or broadcaster

    def _get_row(self, message_id: int) -> dict:
        row = self.db.fetch_one(
            f"SELECT {MESSAGE_COLUMNS} FROM chat_messages WHERE id = ?", [message_id]
        )
        if not row:
            raise NotFoundError("Message introuvable")
        return row

    def get_message(self, message_id: int) -> dict:
        return dump(ChatMessageOut, self._get_row(message_id))

    def list_messages(self, channel: str | None, limit=None, after_id=None, search: str | None = None) -> list[dict]:
        """
        Latest live messages of a channel, oldest first.

        ``after_id`` restricts to newer messages for polling clients.
        """
        name = self.events.validate_channel(channel)
        where = ["channel = ?", "deleted_at IS NULL"]
        args: list = [name]
        try:
            after = int(after_id) if after_id not in (None, "") else None
        except (TypeError, ValueError):
            after = None
        if after:
            where.append("id > ?")
            args.append(after)
        if search:
            where.append("(author_name LIKE ? OR text LIKE ?)")
            args.extend([like_pattern(search)] * 2)

        args.append(clamp_limit(limit, 50, 200))
        rows = self.db.fetch_all(
            f"SELECT {MESSAGE_COLUMNS} FROM chat_messages WHERE {' AND '.join(where)} "
            "ORDER BY id DESC LIMIT ?",
            args,
        )
        return dump_all(ChatMessageOut, list(reversed(rows)))

    async def _store_attachments(self, uploads: list[UploadFile]) -> list[dict]:
        if len(uploads) > settings.max_chat_files:
            raise ValidationError(f"Trop de fichiers (max {settings.max_chat_files}).")
        attachments = []
        try:
            for upload in uploads:
                url = await self.files.save_upload("files", upload)
                attachments.append(
                    {
                        "id": Path(url).stem,
                        "name": upload.filename or Path(url).name,
                        "type": attachment_type(upload.content_type),
                        "url": url,
                    }
                )
        except Exception:
            self.files.remove_many(a["url"] for a in attachments)
            raise
        return attachments

    async def create_message(
        self, fields: dict, files: dict[str, list[UploadFile]], caller: Identity | None = None
    ) -> dict:
        """Author fields default to the caller's identity when a token was sent."""
        data = ChatMessageCreate.model_validate(fields)
        channel = self.events.validate_channel(data.channel, "Channel invalide.")
        author_name = data.author_name or (caller.email if caller else None)
        if not author_name:
            raise ValidationError("authorName requis.")
        author_id = data.author_id if data.author_id is not None else (caller.id if caller else None)
        uploads = files.get("files") or []
        if not data.text and not uploads:
            raise ValidationError("Message vide.")

        attachments = await self._store_attachments(uploads)
        try:
            result = self.db.execute(
                "INSERT INTO chat_messages "
                "(channel, author_id, author_name, text, reply_to_id, attachments_json, "
                "created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)",
                [
                    channel,
                    author_id,
                    author_name,
                    data.text,
                    data.reply_to_id,
                    encode_attachments(attachments),
                ],
            )
            self.db.commit()
        except Exception:
            self.files.remove_many(a["url"] for a in attachments)
            raise

        item = self.get_message(result.insert_id)
        self.events.publish(channel, {"type": "message:new", "item": item})
        return item

    async def update_message(
        self, message_id: int, fields: dict, files: dict[str, list[UploadFile]]
    ) -> dict:
        """
        Edit text and attachments.

        New files are appended to the existing attachments, or replace them
        when ``replaceAttachments`` is true.
        """
        current = self._get_row(message_id)
        if current["deleted_at"]:
            raise ValidationError("Message supprimé.")

        replace = parse_bool(fields.get("replaceAttachments"))
        existing = parse_attachments_json(current["attachments_json"])
        added = await self._store_attachments(files.get("files") or [])
        final = added if replace else existing + added

        assignments = []
        args: list = []
        if "text" in fields:
            text = fields["text"]
            assignments.append("text = ?")
            args.append(str(text).strip() or None if text is not None else None)
        assignments += [
            "attachments_json = ?",
            "edited_at = CURRENT_TIMESTAMP",
            "updated_at = CURRENT_TIMESTAMP",
        ]
        args += [encode_attachments(final), message_id]

        try:
            self.db.execute(f"UPDATE chat_messages SET {', '.join(assignments)} WHERE id = ?", args)
            self.db.commit()
        except Exception:
            self.files.remove_many(a["url"] for a in added)
            raise

        if replace:
            self.files.remove_many(a.get("url") for a in existing if isinstance(a, dict))

        item = self.get_message(message_id)
        self.events.publish(current["channel"], {"type": "message:update", "item": item})
        return item

    def delete_message(self, message_id: int) -> int:
        """
        Soft-delete a message under a row lock.

        Returns:
            Number of rows updated.
        """
        with self.db.transaction():
            row = self.db.fetch_one(
                "SELECT id, channel, attachments_json, deleted_at FROM chat_messages "
                f"WHERE id = ?{self.db.lock_clause}",
                [message_id],
            )
            if not row:
                raise NotFoundError("Message introuvable")
            if row["deleted_at"]:
                raise ValidationError("Déjà supprimé.")
            result = self.db.execute(
                "UPDATE chat_messages SET deleted_at = CURRENT_TIMESTAMP, "
                "attachments_json = NULL, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                [message_id],
            )

        attachments = parse_attachments_json(row["attachments_json"])
        self.files.remove_many(a.get("url") for a in attachments if isinstance(a, dict))
        self.events.publish(row["channel"], {"type": "message:delete", "id": message_id})
        logger.info(f"Chat message {message_id} deleted on '{row['channel']}'")
        return result.rows_affected
