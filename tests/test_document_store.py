"""Namespaced document store: CRUD, dotted-path writes and live publication."""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.services.document_store import DocumentStore, StoreUnavailableError, set_path
from app.services.utils.report_helpers import build_default_report


def test_create_get_and_list(store):
    report_id = store.create_document(build_default_report("abcdef123456"))

    document = store.get_document(report_id)
    assert document["id"] == report_id
    assert document["createdAt"] is not None
    assert document["createdBy"] == "abcdef123456"
    assert [d["id"] for d in store.list_documents()] == [report_id]


def test_paths_follow_the_collection_pattern(store):
    assert store.collection_path == "artifacts/test-8d-app/public/data/8d-reports"
    assert store.document_path("abc") == "artifacts/test-8d-app/public/data/8d-reports/abc"


def test_namespaces_are_isolated(store, db_session, hub):
    store.create_document(build_default_report("abcdef123456"))
    other = DocumentStore(db=db_session, hub=hub, app_id="another-app")

    assert other.list_documents() == []


def test_update_field_touches_only_the_addressed_path(store):
    report_id = store.create_document(build_default_report("abcdef123456"))
    before = store.get_document(report_id)

    assert store.update_field(report_id, "d2_problem.where", "Line 3") is True

    after = store.get_document(report_id)
    assert after["d2_problem"]["where"] == "Line 3"
    assert {k: v for k, v in after["d2_problem"].items() if k != "where"} == \
        {k: v for k, v in before["d2_problem"].items() if k != "where"}
    for key in before:
        if key != "d2_problem":
            assert after[key] == before[key]


def test_update_missing_document_returns_false(store):
    assert store.update_field("does-not-exist", "title", "x") is False


def test_delete_document(store):
    report_id = store.create_document(build_default_report("abcdef123456"))

    assert store.delete_document(report_id) is True
    assert store.get_document(report_id) is None
    assert store.delete_document(report_id) is False


def test_set_path_creates_missing_mappings_without_mutating():
    data = {"a": {"b": 1}, "c": [1, 2]}

    result = set_path(data, "a.x.y", "new")

    assert result == {"a": {"b": 1, "x": {"y": "new"}}, "c": [1, 2]}
    assert data == {"a": {"b": 1}, "c": [1, 2]}


@pytest.mark.parametrize("path", ["", "a..b", ".a", "a."])
def test_set_path_rejects_malformed_paths(path):
    with pytest.raises(ValueError):
        set_path({}, path, 1)


def test_write_failure_raises_store_unavailable(store, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("database is gone")

    monkeypatch.setattr(store.db, "commit", broken_commit)

    with pytest.raises(StoreUnavailableError):
        store.create_document(build_default_report("abcdef123456"))


def test_collection_subscription_tracks_creates_and_deletes(store):
    received = []
    subscription = store.subscribe_collection(received.append)

    first = store.create_document(build_default_report("abcdef123456"))
    second = store.create_document(build_default_report("abcdef123456"))
    store.delete_document(first)

    assert [sorted(d["id"] for d in snapshot) for snapshot in received] == [
        [],
        [first],
        sorted([first, second]),
        [second],
    ]
    subscription.cancel()


def test_document_subscription_sees_updates_then_none(store):
    report_id = store.create_document(build_default_report("abcdef123456"))
    received = []
    store.subscribe_document(report_id, received.append)

    store.update_field(report_id, "title", "Scrap on line 3")
    store.delete_document(report_id)

    assert received[0]["title"].startswith("New Report")
    assert received[1]["title"] == "Scrap on line 3"
    assert received[2] is None


def test_document_subscription_on_missing_document_delivers_none(store):
    received = []
    store.subscribe_document("nope", received.append)

    assert received == [None]
