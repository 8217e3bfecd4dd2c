"""Typed records for the Joplin Data API."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    """Item type names accepted by the ``type`` filter of ``/search``."""

    NOTE = "note"
    FOLDER = "folder"
    SETTING = "setting"
    RESOURCE = "resource"
    TAG = "tag"
    NOTE_TAG = "note_tag"
    SEARCH = "search"
    ALARM = "alarm"
    MASTER_KEY = "master_key"
    ITEM_CHANGE = "item_change"
    NOTE_RESOURCE = "note_resource"
    RESOURCE_LOCAL_STATE = "resource_local_state"
    REVISION = "revision"
    MIGRATION = "migration"
    SMART_FILTER = "smart_filter"
    COMMAND = "command"


class Page(BaseModel):
    """One page of a collection endpoint."""

    items: list[dict[str, Any]] = Field(default_factory=list)
    has_more: bool = False
    page: int = Field(default=1, ge=1)


class _Entity(BaseModel):
    # Joplin only returns the fields named in the ``fields`` selector.
    model_config = ConfigDict(extra="allow")

    id: str | None = None


class Item(_Entity):
    parent_id: str | None = None
    title: str | None = None


class Tag(Item):
    created_time: int | None = None
    updated_time: int | None = None
    user_created_time: int | None = None
    user_updated_time: int | None = None
    encryption_cipher_text: str | None = None
    encryption_applied: int | None = None
    is_shared: int | None = None


class Note(Item):
    body: str | None = None
    created_time: int | None = None
    updated_time: int | None = None
    is_conflict: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    author: str | None = None
    source_url: str | None = None
    is_todo: int | None = None
    todo_due: int | None = None
    todo_completed: int | None = None
    source: str | None = None
    source_application: str | None = None
    application_data: str | None = None
    order: float | None = None
    user_created_time: int | None = None
    user_updated_time: int | None = None
    encryption_cipher_text: str | None = None
    encryption_applied: int | None = None
    markup_language: int | None = None
    is_shared: int | None = None
    share_id: str | None = None
    conflict_original_id: str | None = None
    master_key_id: str | None = None


class Folder(Item):
    created_time: int | None = None
    updated_time: int | None = None
    user_created_time: int | None = None
    user_updated_time: int | None = None
    encryption_cipher_text: str | None = None
    encryption_applied: int | None = None
    encryption_blob_encrypted: int | None = None
    is_shared: int | None = None
    share_id: str | None = None
    master_key_id: str | None = None
    icon: str | None = None


class Resource(Item):
    mime: str | None = None
    filename: str | None = None
    created_time: int | None = None
    updated_time: int | None = None
    user_created_time: int | None = None
    user_updated_time: int | None = None
    file_extension: str | None = None
    encryption_cipher_text: str | None = None
    encryption_applied: int | None = None
    encryption_blob_encrypted: int | None = None
    size: int | None = None
    is_shared: int | None = None
    share_id: str | None = None
    master_key_id: str | None = None


class Event(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str
    item_type: int | None = None
    item_id: str | None = None
    type: int | None = None
    created_time: int | None = None
    source: int | None = None
    before_change_item: str | None = None


class EventPage(BaseModel):
    """One cursor page of the ``/events`` change feed."""

    items: list[Event] = Field(default_factory=list)
    has_more: bool = False
    cursor: str | None = None


class FolderNode(BaseModel):
    id: str
    title: str | None = None
    children: list[FolderNode] = Field(default_factory=list)
