from __future__ import annotations

import json

import httpx
import pytest

from joplin_data_cli import operations
from joplin_data_cli.errors import JoplinApiError, JoplinNotFoundError, PaginationError
from joplin_data_cli.models import ItemType, Tag


class Recorder:
    """Answers every request with the same canned response and remembers what was asked."""

    def __init__(self, status: int = 200, **kwargs):
        self.status = status
        self.kwargs = kwargs or {"json": {}}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, **self.kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_body(self):
        return json.loads(self.last.content) if self.last.content else None


def _echo_id(request: httpx.Request) -> httpx.Response:
    item_id = request.url.path.rsplit("/", 1)[-1]
    return httpx.Response(200, json={"id": item_id, "parent_id": "", "title": f"title {item_id}"})


@pytest.mark.parametrize("getter", [operations.get_tag, operations.get_note, operations.get_folder])
def test_get_by_id_round_trips_id(make_client, getter) -> None:
    entity = getter(make_client(_echo_id), "0123456789abcdef0123456789abcdef")
    assert entity.id == "0123456789abcdef0123456789abcdef"


def test_get_tag_requests_fields(make_client) -> None:
    rec = Recorder(200, json={"id": "t1", "title": "work"})

    tag = operations.get_tag(make_client(rec), "t1")

    assert tag.title == "work"
    assert rec.last.method == "GET"
    assert rec.last.url.path == "/tags/t1"
    assert rec.last.url.params["fields"] == "id,parent_id,title"


def test_get_note_not_found_is_distinct_from_server_error(make_client) -> None:
    with pytest.raises(JoplinNotFoundError):
        operations.get_note(make_client(Recorder(404, text="Not Found")), "nope")

    with pytest.raises(JoplinApiError) as excinfo:
        operations.get_note(make_client(Recorder(500, text="boom")), "n1")
    assert not isinstance(excinfo.value, JoplinNotFoundError)


def test_create_tag(make_client) -> None:
    rec = Recorder(200, json={"id": "t9", "title": "new"})

    tag = operations.create_tag(make_client(rec), "new")

    assert tag.id == "t9"
    assert rec.last.method == "POST"
    assert rec.last.url.path == "/tags"
    assert rec.last_body == {"title": "new"}


def test_delete_tag(make_client) -> None:
    rec = Recorder(200, content=b"")

    assert operations.delete_tag(make_client(rec), "t1") is None
    assert rec.last.method == "DELETE"
    assert rec.last.url.path == "/tags/t1"


def test_add_and_remove_tag_on_note(make_client) -> None:
    rec = Recorder()
    client = make_client(rec)

    operations.add_tag_to_note(client, "t1", "n1")
    assert rec.last.method == "POST"
    assert rec.last.url.path == "/tags/t1/notes"
    assert rec.last_body == {"id": "n1"}

    operations.remove_tag_from_note(client, "t1", "n1")
    assert rec.last.method == "DELETE"
    assert rec.last.url.path == "/tags/t1/notes/n1"


def test_update_note_sends_only_given_fields(make_client) -> None:
    rec = Recorder(200, json={"title": "renamed"})

    note = operations.update_note(make_client(rec), "n1", title="renamed")

    assert note.id == "n1"
    assert note.title == "renamed"
    assert rec.last.method == "PUT"
    assert rec.last_body == {"title": "renamed"}


def test_update_note_requires_a_field(make_client) -> None:
    rec = Recorder()
    with pytest.raises(ValueError):
        operations.update_note(make_client(rec), "n1")
    assert rec.requests == []


def test_note_author_round_trip(make_client) -> None:
    rec = Recorder(200, json={"id": "n1", "title": "x", "author": "Ada"})
    client = make_client(rec)

    assert operations.get_note_author(client, "n1") == "Ada"
    assert rec.last.url.params["fields"] == "id,title,author"

    operations.update_note_author(client, "n1", "Grace")
    assert rec.last.method == "PUT"
    assert rec.last_body == {"author": "Grace"}


def test_create_note_and_folder(make_client) -> None:
    rec = Recorder(200, json={"id": "x1"})
    client = make_client(rec)

    operations.create_note(client, "Title", "Body", parent_id="f1")
    assert rec.last.url.path == "/notes"
    assert rec.last_body == {"title": "Title", "body": "Body", "parent_id": "f1"}

    operations.create_folder(client, "Inbox")
    assert rec.last.url.path == "/folders"
    assert rec.last_body == {"title": "Inbox"}


def test_update_and_delete_folder(make_client) -> None:
    rec = Recorder(200, json={})
    client = make_client(rec)

    folder = operations.update_folder(client, "f1", parent_id="f0")
    assert folder.id == "f1"
    assert rec.last_body == {"parent_id": "f0"}

    operations.delete_folder(client, "f1")
    assert rec.last.method == "DELETE"
    assert rec.last.url.path == "/folders/f1"


def test_list_notes_by_tag_passes_ordering(make_client) -> None:
    rec = Recorder(200, json={"items": [{"id": "n1"}], "has_more": False})

    notes = operations.list_notes_by_tag(make_client(rec), "t1", order_by="title", order_dir="asc")

    assert [n.id for n in notes] == ["n1"]
    assert rec.last.url.path == "/tags/t1/notes"
    assert rec.last.url.params["order_dir"] == "ASC"
    assert rec.last.url.params["fields"] == "id,parent_id,title"


def test_list_note_tags_not_found(make_client) -> None:
    with pytest.raises(PaginationError) as excinfo:
        operations.list_note_tags(make_client(Recorder(404)), "missing")
    assert excinfo.value.not_found


def test_list_folder_notes_and_folders(make_client) -> None:
    rec = Recorder(200, json={"items": [{"id": "a"}], "has_more": False})
    client = make_client(rec)

    assert [n.id for n in operations.list_folder_notes(client, "f1", fields=" id , title ")] == ["a"]
    assert rec.last.url.path == "/folders/f1/notes"
    assert rec.last.url.params["fields"] == "id,title"

    assert [f.id for f in operations.list_folders(client)] == ["a"]
    assert rec.last.url.path == "/folders"


def test_folder_tree(make_client) -> None:
    folders = [
        {"id": "b", "parent_id": "", "title": "B"},
        {"id": "a", "parent_id": "", "title": "A"},
        {"id": "a1", "parent_id": "a", "title": "A1"},
    ]
    rec = Recorder(200, json={"items": folders, "has_more": False})

    tree = operations.folder_tree(make_client(rec))

    assert [n.id for n in tree] == ["a", "b"]
    assert [n.id for n in tree[0].children] == ["a1"]
    assert tree[1].children == []


def test_resources(make_client) -> None:
    rec = Recorder(200, json={"id": "r1", "mime": "image/png", "size": 12})
    client = make_client(rec)

    resource = operations.get_resource(client, "r1")
    assert resource.mime == "image/png"
    assert rec.last.url.path == "/resources/r1"

    operations.delete_resource(client, "r1")
    assert rec.last.method == "DELETE"


def test_list_resources(make_client) -> None:
    rec = Recorder(200, json={"items": [{"id": "r1", "filename": "a.png"}], "has_more": False})

    resources = operations.list_resources(make_client(rec), fields="id,filename")

    assert [r.filename for r in resources] == ["a.png"]
    assert rec.last.url.path == "/resources"
    assert rec.last.url.params["fields"] == "id,filename"


def test_list_events(make_client) -> None:
    rec = Recorder(
        200,
        json={
            "items": [{"id": 5, "item_type": 1, "item_id": "n1", "type": 2}],
            "has_more": False,
            "cursor": "5",
        },
    )

    page = operations.list_events(make_client(rec), cursor="4")

    assert page.cursor == "5"
    assert page.items[0].item_id == "n1"
    assert rec.last.url.params["cursor"] == "4"


def test_search_follows_pages_with_filters(make_client) -> None:
    pages = [
        {"items": [{"id": "1", "title": "one"}], "has_more": True},
        {"items": [{"id": "2", "title": "two"}], "has_more": False},
    ]
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=pages[int(request.url.params["page"]) - 1])

    items = operations.search(
        make_client(handler), "hello world", item_type=ItemType.FOLDER, fields="id,title"
    )

    assert [i.title for i in items] == ["one", "two"]
    assert [r.url.params["page"] for r in requests] == ["1", "2"]
    params = requests[0].url.params
    assert params["query"] == "hello world"
    assert params["type"] == "folder"
    assert params["fields"] == "id,title"


def test_search_without_filters(make_client) -> None:
    rec = Recorder(200, json={"items": [], "has_more": False})

    assert operations.search(make_client(rec), "x") == []
    assert "type" not in rec.last.url.params
    assert "fields" not in rec.last.url.params


def test_search_with_fields_that_omit_id(make_client) -> None:
    rec = Recorder(200, json={"items": [{"title": "Taxes"}], "has_more": False})

    items = operations.search(make_client(rec), "tax", fields="title")

    assert [(i.id, i.title) for i in items] == [(None, "Taxes")]
    assert rec.last.url.params["fields"] == "title"


def test_list_failure_keeps_earlier_pages_as_models(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["page"] == "1":
            return httpx.Response(
                200, json={"items": [{"id": "t1", "title": "work"}], "has_more": True}
            )
        return httpx.Response(500, text="boom")

    with pytest.raises(PaginationError) as excinfo:
        operations.list_tags(make_client(handler))

    assert excinfo.value.items == [Tag(id="t1", title="work")]
    assert isinstance(excinfo.value.cause, JoplinApiError)
    assert excinfo.value.__cause__ is excinfo.value.cause
    assert not excinfo.value.not_found
