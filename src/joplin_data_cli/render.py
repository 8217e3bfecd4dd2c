"""Plain-text tables for entity listings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, NamedTuple

from pydantic import BaseModel

SEPARATOR = " │ "
DEFAULT_FIELDS = ("id", "parent_id", "title")


class CellFormat(NamedTuple):
    header: str
    spec: str


_ID = CellFormat("ID", "<32")
_PARENT_ID = CellFormat("Parent ID", "<32")
_TITLE = CellFormat("Title", "<60.60")
_TIME = CellFormat("", ">16")
_FLAG = CellFormat("", "<16")
_TEXT = CellFormat("", "<32.32")
_COORD = CellFormat("", "<12.4f")


def _cell(base: CellFormat, header: str) -> CellFormat:
    return base._replace(header=header)


_COMMON: dict[str, CellFormat] = {
    "id": _ID,
    "parent_id": _PARENT_ID,
    "title": _TITLE,
    "created_time": _cell(_TIME, "Created Time"),
    "updated_time": _cell(_TIME, "Updated Time"),
    "user_created_time": _cell(_TIME, "User Created Time"),
    "user_updated_time": _cell(_TIME, "User Updated Time"),
    "encryption_cipher_text": _cell(_TEXT, "Encryption Cipher Text"),
    "encryption_applied": _cell(_FLAG, "Encryption Applied"),
    "is_shared": _cell(_FLAG, "Is Shared"),
}

_SHARED_ITEM: dict[str, CellFormat] = {
    "share_id": _cell(_TEXT, "Share ID"),
    "master_key_id": _cell(_TEXT, "Master Key ID"),
}

FIELD_FORMATS: dict[str, dict[str, CellFormat]] = {
    "tag": dict(_COMMON),
    "note": {
        **_COMMON,
        **_SHARED_ITEM,
        "body": _cell(_TITLE, "Body"),
        "is_conflict": _cell(_FLAG, "Is Conflict"),
        "latitude": _cell(_COORD, "Latitude"),
        "longitude": _cell(_COORD, "Longitude"),
        "altitude": _cell(_COORD, "Altitude"),
        "author": _cell(_TEXT, "Author"),
        "source_url": _cell(_TEXT, "Source URL"),
        "is_todo": _cell(_FLAG, "Is Todo"),
        "todo_due": _cell(_TIME, "Todo Due"),
        "todo_completed": _cell(_TIME, "Todo Completed"),
        "source": _cell(_TEXT, "Source"),
        "source_application": _cell(_TEXT, "Source Application"),
        "application_data": _cell(_TEXT, "Application Data"),
        "order": _cell(_FLAG, "Order"),
        "markup_language": _cell(_FLAG, "Markup Language"),
        "conflict_original_id": _cell(_TEXT, "Conflict Original ID"),
    },
    "folder": {
        **_COMMON,
        **_SHARED_ITEM,
        "encryption_blob_encrypted": _cell(_FLAG, "Encryption Blob Encrypted"),
        "icon": _cell(_TEXT, "Icon"),
    },
    "resource": {
        **_COMMON,
        **_SHARED_ITEM,
        "mime": _cell(_TEXT, "Mime"),
        "filename": _cell(_TEXT, "Filename"),
        "file_extension": _cell(_FLAG, "File Extension"),
        "encryption_blob_encrypted": _cell(_FLAG, "Encryption Blob Encrypted"),
        "size": _cell(_TIME, "Size"),
    },
    "search": {"id": _ID, "parent_id": _PARENT_ID, "title": _TITLE},
}


def formats_for(kind: str, fields: Sequence[str] = DEFAULT_FIELDS) -> list[CellFormat]:
    """Look up the cell formats of ``fields`` for an entity kind."""
    try:
        table = FIELD_FORMATS[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind {kind!r}") from None
    unknown = [f for f in fields if f not in table]
    if unknown:
        raise ValueError(f"Unknown {kind} field(s): {', '.join(unknown)}")
    return [table[f] for f in fields]


def format_cell(fmt: CellFormat, value: Any) -> str:
    if value is None:
        value = ""
    # Numeric specs like ".4f" only apply to numbers; fall back to the width.
    try:
        return format(value, fmt.spec)
    except (TypeError, ValueError):
        width = "".join(ch for ch in fmt.spec.split(".")[0] if ch.isdigit())
        return format(str(value), f"<{width}" if width else "")


def format_row(formats: Sequence[CellFormat], values: Sequence[Any]) -> str:
    return SEPARATOR.join(format_cell(f, v) for f, v in zip(formats, values)).rstrip()


def header_row(formats: Sequence[CellFormat]) -> str:
    return format_row(formats, [f.header for f in formats])


def _values(item: BaseModel | dict[str, Any], fields: Sequence[str]) -> list[Any]:
    data = item.model_dump() if isinstance(item, BaseModel) else item
    return [data.get(f) for f in fields]


def render_table(
    kind: str,
    items: Iterable[BaseModel | dict[str, Any]],
    fields: Sequence[str] = DEFAULT_FIELDS,
    *,
    header: bool = True,
) -> list[str]:
    """Render ``items`` as one header line plus one line per item."""
    formats = formats_for(kind, fields)
    lines = [header_row(formats)] if header else []
    lines.extend(format_row(formats, _values(item, fields)) for item in items)
    return lines
