"""Pydantic schemas for chat messages."""

import json
from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, model_validator

from bmvt.schemas.common import InputModel, RowModel


class Attachment(BaseModel):
    id: str
    name: str
    type: Literal["image", "video", "file"] = "file"
    url: str


class ChatMessageCreate(InputModel):
    channel: str | None = None
    author_name: str | None = Field(None, validation_alias=AliasChoices("authorName", "author_name"))
    author_id: int | None = Field(None, validation_alias=AliasChoices("authorId", "author_id"))
    text: str | None = None
    reply_to_id: int | None = Field(None, validation_alias=AliasChoices("replyToId", "reply_to_id"))


class ChatMessageOut(RowModel):
    id: int
    channel: str
    author_id: int | None = None
    author_name: str | None = None
    text: str | None = None
    reply_to_id: int | None = None
    attachments: list[Attachment] = []
    edited_at: datetime | None = None
    deleted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def parse_attachments(cls, data):
        if isinstance(data, dict) and "attachments_json" in data:
            data = dict(data)
            data["attachments"] = parse_attachments_json(data.pop("attachments_json"))
        return data


def parse_attachments_json(value: str | None) -> list[dict]:
    """Decode the stored attachment list, tolerating empty or corrupt values."""
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except ValueError:
        return []
    return parsed if isinstance(parsed, list) else []
