"""Typed operations on tags, notes, folders, resources and events.

Every function takes the ``JoplinClient`` it talks through as its first
argument. Single-item calls raise ``JoplinNotFoundError`` for unknown ids and
``JoplinApiError`` for other error statuses; list calls raise
``PaginationError`` carrying, as models, whatever was fetched before the
failure.
"""

from __future__ import annotations

import threading
from typing import Any, TypeVar

from pydantic import BaseModel

from .errors import PaginationError
from .joplin_client import JoplinClient
from .models import (
    EventPage,
    Folder,
    FolderNode,
    Item,
    ItemType,
    Note,
    Resource,
    Tag,
)

TAG_FIELDS = "id,parent_id,title"
NOTE_FIELDS = "id,parent_id,title"
NOTE_DETAIL_FIELDS = "id,parent_id,title,body,created_time,updated_time"
FOLDER_FIELDS = "id,parent_id,title"
RESOURCE_FIELDS = "id,title,mime,filename,file_extension,size,updated_time"

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_fields(fields: str | None) -> str | None:
    if fields is None:
        return None
    cleaned = ",".join([f.strip() for f in fields.split(",") if f.strip()])
    return cleaned or None


def _fetch_models(
    client: JoplinClient, model: type[ModelT], path: str, **kwargs: Any
) -> list[ModelT]:
    try:
        raw = client.fetch_all(path, **kwargs)
    except PaginationError as exc:
        items = [model.model_validate(i) for i in exc.items]
        raise PaginationError(items, exc.cause) from exc.cause
    return [model.model_validate(i) for i in raw]


def _build_folder_tree(folders: list[dict[str, Any]]) -> list[FolderNode]:
    by_parent: dict[str | None, list[dict[str, Any]]] = {}
    for f in folders:
        # Top-level folders carry an empty parent_id.
        by_parent.setdefault(f.get("parent_id") or None, []).append(f)

    def build(parent_id: str | None) -> list[FolderNode]:
        children = []
        for f in sorted(by_parent.get(parent_id, []), key=lambda x: x.get("title") or ""):
            node = FolderNode(
                id=str(f.get("id")), title=f.get("title"), children=build(f.get("id"))
            )
            children.append(node)
        return children

    return build(None)


# Tags


def list_tags(
    client: JoplinClient,
    *,
    order_by: str | None = None,
    order_dir: str | None = None,
    cancel: threading.Event | None = None,
) -> list[Tag]:
    return _fetch_models(
        client,
        Tag,
        "/tags",
        fields=TAG_FIELDS,
        order_by=order_by,
        order_dir=order_dir,
        cancel=cancel,
    )


def get_tag(client: JoplinClient, tag_id: str, *, fields: str | None = TAG_FIELDS) -> Tag:
    params = {"fields": fields} if fields else None
    return Tag.model_validate(client.request_json("GET", f"/tags/{tag_id}", params=params))


def create_tag(client: JoplinClient, title: str) -> Tag:
    return Tag.model_validate(client.request_json("POST", "/tags", json_body={"title": title}))


def delete_tag(client: JoplinClient, tag_id: str) -> None:
    client.request_json("DELETE", f"/tags/{tag_id}")


def list_notes_by_tag(
    client: JoplinClient,
    tag_id: str,
    *,
    order_by: str | None = None,
    order_dir: str | None = None,
    cancel: threading.Event | None = None,
) -> list[Note]:
    """List the notes carrying a tag."""
    return _fetch_models(
        client,
        Note,
        f"/tags/{tag_id}/notes",
        fields=NOTE_FIELDS,
        order_by=order_by,
        order_dir=order_dir,
        cancel=cancel,
    )


def add_tag_to_note(client: JoplinClient, tag_id: str, note_id: str) -> None:
    # Joplin expects a body with {"id": <note_id>}.
    client.request_json("POST", f"/tags/{tag_id}/notes", json_body={"id": note_id})


def remove_tag_from_note(client: JoplinClient, tag_id: str, note_id: str) -> None:
    client.request_json("DELETE", f"/tags/{tag_id}/notes/{note_id}")


# Notes


def list_notes(
    client: JoplinClient,
    *,
    fields: str | None = NOTE_FIELDS,
    order_by: str | None = None,
    order_dir: str | None = None,
    cancel: threading.Event | None = None,
) -> list[Note]:
    return _fetch_models(
        client,
        Note,
        "/notes",
        fields=parse_fields(fields),
        order_by=order_by,
        order_dir=order_dir,
        cancel=cancel,
    )


def get_note(client: JoplinClient, note_id: str, *, fields: str | None = NOTE_FIELDS) -> Note:
    params = {"fields": fields} if fields else None
    return Note.model_validate(client.request_json("GET", f"/notes/{note_id}", params=params))


def create_note(
    client: JoplinClient,
    title: str,
    body: str = "",
    *,
    parent_id: str | None = None,
) -> Note:
    payload: dict[str, Any] = {"title": title, "body": body}
    if parent_id:
        payload["parent_id"] = parent_id
    return Note.model_validate(client.request_json("POST", "/notes", json_body=payload))


def update_note(
    client: JoplinClient,
    note_id: str,
    *,
    title: str | None = None,
    parent_id: str | None = None,
    body: str | None = None,
) -> Note:
    """Update fields of an existing note; ``None`` leaves a field untouched."""
    payload: dict[str, Any] = {}
    if title is not None:
        payload["title"] = title
    if parent_id is not None:
        payload["parent_id"] = parent_id
    if body is not None:
        payload["body"] = body
    if not payload:
        raise ValueError("At least one of 'title', 'parent_id' or 'body' must be provided")
    raw = client.request_json("PUT", f"/notes/{note_id}", json_body=payload)
    return Note.model_validate({"id": note_id, **raw})


def delete_note(client: JoplinClient, note_id: str) -> None:
    client.request_json("DELETE", f"/notes/{note_id}")


def get_note_author(client: JoplinClient, note_id: str) -> str:
    note = get_note(client, note_id, fields="id,title,author")
    return note.author or ""


def update_note_author(client: JoplinClient, note_id: str, author: str) -> None:
    client.request_json("PUT", f"/notes/{note_id}", json_body={"author": author})


def list_note_tags(
    client: JoplinClient,
    note_id: str,
    *,
    order_by: str | None = None,
    order_dir: str | None = None,
    cancel: threading.Event | None = None,
) -> list[Tag]:
    return _fetch_models(
        client,
        Tag,
        f"/notes/{note_id}/tags",
        fields=TAG_FIELDS,
        order_by=order_by,
        order_dir=order_dir,
        cancel=cancel,
    )


# Folders


def list_folders(
    client: JoplinClient,
    *,
    fields: str | None = FOLDER_FIELDS,
    order_by: str | None = None,
    order_dir: str | None = None,
    cancel: threading.Event | None = None,
) -> list[Folder]:
    return _fetch_models(
        client,
        Folder,
        "/folders",
        fields=parse_fields(fields),
        order_by=order_by,
        order_dir=order_dir,
        cancel=cancel,
    )


def get_folder(
    client: JoplinClient, folder_id: str, *, fields: str | None = FOLDER_FIELDS
) -> Folder:
    params = {"fields": fields} if fields else None
    return Folder.model_validate(
        client.request_json("GET", f"/folders/{folder_id}", params=params)
    )


def create_folder(client: JoplinClient, title: str, *, parent_id: str | None = None) -> Folder:
    payload: dict[str, Any] = {"title": title}
    if parent_id:
        payload["parent_id"] = parent_id
    return Folder.model_validate(client.request_json("POST", "/folders", json_body=payload))


def update_folder(
    client: JoplinClient,
    folder_id: str,
    *,
    title: str | None = None,
    parent_id: str | None = None,
) -> Folder:
    """Rename a folder and/or move it by changing ``parent_id``."""
    payload: dict[str, Any] = {}
    if title is not None:
        payload["title"] = title
    if parent_id is not None:
        payload["parent_id"] = parent_id
    if not payload:
        raise ValueError("At least one of 'title' or 'parent_id' must be provided")
    raw = client.request_json("PUT", f"/folders/{folder_id}", json_body=payload)
    return Folder.model_validate({"id": folder_id, **raw})


def delete_folder(client: JoplinClient, folder_id: str) -> None:
    client.request_json("DELETE", f"/folders/{folder_id}")


def list_folder_notes(
    client: JoplinClient,
    folder_id: str,
    *,
    fields: str | None = NOTE_FIELDS,
    order_by: str | None = None,
    order_dir: str | None = None,
    cancel: threading.Event | None = None,
) -> list[Note]:
    return _fetch_models(
        client,
        Note,
        f"/folders/{folder_id}/notes",
        fields=parse_fields(fields),
        order_by=order_by,
        order_dir=order_dir,
        cancel=cancel,
    )


def folder_tree(client: JoplinClient) -> list[FolderNode]:
    """Return every folder arranged by parent, siblings sorted by title."""
    return _build_folder_tree(client.fetch_all("/folders", fields=FOLDER_FIELDS))


# Resources


def list_resources(
    client: JoplinClient,
    *,
    fields: str | None = RESOURCE_FIELDS,
    cancel: threading.Event | None = None,
) -> list[Resource]:
    return _fetch_models(
        client, Resource, "/resources", fields=parse_fields(fields), cancel=cancel
    )


def get_resource(
    client: JoplinClient, resource_id: str, *, fields: str | None = RESOURCE_FIELDS
) -> Resource:
    params = {"fields": fields} if fields else None
    return Resource.model_validate(
        client.request_json("GET", f"/resources/{resource_id}", params=params)
    )


def delete_resource(client: JoplinClient, resource_id: str) -> None:
    client.request_json("DELETE", f"/resources/{resource_id}")


# Events


def list_events(client: JoplinClient, *, cursor: str | None = None) -> EventPage:
    """Fetch one page of the change feed, starting after ``cursor``.

    Without a cursor Joplin returns only the latest cursor, no events.
    """
    params = {"cursor": cursor} if cursor else None
    return EventPage.model_validate(client.request_json("GET", "/events", params=params))


# Search


def search(
    client: JoplinClient,
    query: str,
    *,
    item_type: ItemType | str | None = None,
    fields: str | None = None,
    cancel: threading.Event | None = None,
) -> list[Item]:
    """Full-text search, following every result page."""
    params: dict[str, Any] = {"query": query}
    if item_type:
        params["type"] = item_type.value if isinstance(item_type, ItemType) else item_type
    return _fetch_models(
        client, Item, "/search", params=params, fields=parse_fields(fields), cancel=cancel
    )
