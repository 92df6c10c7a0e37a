import asyncio

import pytest

from knocklock.models.enums import Collection, DELETE_PROMPTS
from knocklock.utils.exceptions import (
    ConfirmationError, PrincipalNotResolvedError, RecordNotFoundError, StoreError, ValidationError,
)

from conftest import NOW_MS, path


def enroll(controller, uid="A3B4C5", name="Mom"):
    return asyncio.run(controller.entities.enroll_key(uid, name))


def toggle(controller, collection, record_id):
    entity = controller.entities.find(collection, record_id)
    return asyncio.run(controller.entities.toggle_blocked(collection, entity))


def test_enroll_and_toggle_key(controller, store, sink):
    key_id = enroll(controller)

    assert store.records(Collection.RFID_TAGS)[key_id] == {
        "uid": "A3B4C5", "name": "Mom", "blocked": False, "addedAt": NOW_MS,
    }
    assert sink.sent == [{"action": "add_tag", "uid": "A3B4C5", "name": "Mom"}]
    [key] = controller.synchronizer.keys
    assert (key.id, key.blocked) == (key_id, False)

    assert toggle(controller, Collection.RFID_TAGS, key_id) is True
    assert controller.synchronizer.keys[0].blocked is True
    assert toggle(controller, Collection.RFID_TAGS, key_id) is False
    assert controller.synchronizer.keys[0].blocked is False
    # only the blocked field is written
    assert store.records(Collection.RFID_TAGS)[key_id]["name"] == "Mom"
    assert store.count("update", Collection.RFID_TAGS) == 2


def test_enroll_trims_input(controller, store):
    key_id = enroll(controller, uid="  0xFF ", name=" Dad  ")
    assert store.records(Collection.RFID_TAGS)[key_id]["uid"] == "0xFF"
    assert store.records(Collection.RFID_TAGS)[key_id]["name"] == "Dad"


@pytest.mark.parametrize("uid,name", [("", "Mom"), ("A3B4C5", "   "), (None, None)])
def test_enroll_validation_fails_without_write(controller, store, sink, uid, name):
    with pytest.raises(ValidationError):
        enroll(controller, uid=uid, name=name)
    assert store.calls == []
    assert sink.sent == []


def test_enroll_store_failure_propagates(controller, store, sink):
    store.fail_on.add(("push", Collection.RFID_TAGS))
    with pytest.raises(StoreError):
        enroll(controller)
    assert sink.sent == []


def test_enroll_requires_principal(controller, store):
    controller.synchronizer.stop()
    with pytest.raises(PrincipalNotResolvedError):
        enroll(controller)
    assert store.calls == []


def test_toggle_unknown_record(controller):
    with pytest.raises(RecordNotFoundError):
        controller.entities.find(Collection.RFID_TAGS, "missing")


def test_toggle_failure_leaves_state(controller, store):
    key_id = enroll(controller)
    store.fail_ids.add(key_id)
    with pytest.raises(StoreError):
        toggle(controller, Collection.RFID_TAGS, key_id)
    assert controller.synchronizer.keys[0].blocked is False


def test_toggle_record_deleted_elsewhere(controller, store):
    key_id = enroll(controller)
    key = controller.entities.find(Collection.RFID_TAGS, key_id)
    del store.collections[path(Collection.RFID_TAGS)][key_id]
    with pytest.raises(RecordNotFoundError):
        asyncio.run(controller.entities.toggle_blocked(Collection.RFID_TAGS, key))


def test_logs_cannot_be_managed(controller):
    with pytest.raises(ValidationError):
        controller.entities.find(Collection.ACCESS_LOGS, "x")


def test_delete_requires_confirmation(controller, store):
    key_id = enroll(controller)
    pending = controller.entities.request_delete(Collection.RFID_TAGS, key_id)

    assert pending.recordId == key_id
    assert pending.prompt == DELETE_PROMPTS[Collection.RFID_TAGS]
    assert pending.expiresAt == NOW_MS + 60_000
    # nothing happens until confirmed
    assert store.count("remove", Collection.RFID_TAGS) == 0
    assert [k.id for k in controller.synchronizer.keys] == [key_id]

    asyncio.run(controller.entities.confirm_delete(pending.token))
    assert store.count("remove", Collection.RFID_TAGS) == 1
    assert controller.synchronizer.keys == ()


def test_cancelled_delete_removes_nothing(controller, store):
    key_id = enroll(controller)
    pending = controller.entities.request_delete(Collection.RFID_TAGS, key_id)
    controller.entities.cancel_delete(pending.token)

    with pytest.raises(ConfirmationError):
        asyncio.run(controller.entities.confirm_delete(pending.token))
    assert store.count("remove", Collection.RFID_TAGS) == 0
    assert len(controller.synchronizer.keys) == 1


def test_confirmation_is_single_use(controller, store):
    key_id = enroll(controller)
    pending = controller.entities.request_delete(Collection.RFID_TAGS, key_id)
    asyncio.run(controller.entities.confirm_delete(pending.token))
    with pytest.raises(ConfirmationError):
        asyncio.run(controller.entities.confirm_delete(pending.token))
    assert store.count("remove", Collection.RFID_TAGS) == 1


def test_expired_confirmation_rejected(controller, store, clock):
    key_id = enroll(controller)
    pending = controller.entities.request_delete(Collection.RFID_TAGS, key_id)
    clock.advance(60_000)
    with pytest.raises(ConfirmationError, match="expired"):
        asyncio.run(controller.entities.confirm_delete(pending.token))
    assert store.count("remove", Collection.RFID_TAGS) == 0


def test_delete_unknown_record(controller):
    with pytest.raises(RecordNotFoundError):
        controller.entities.request_delete(Collection.RFID_TAGS, "missing")


def test_delete_failure_propagates(controller, store):
    key_id = enroll(controller)
    pending = controller.entities.request_delete(Collection.RFID_TAGS, key_id)
    store.fail_ids.add(key_id)
    with pytest.raises(StoreError):
        asyncio.run(controller.entities.confirm_delete(pending.token))
    assert len(controller.synchronizer.keys) == 1


def test_pattern_toggle_and_delete(controller, store):
    store.seed(path(Collection.KNOCK_PATTERNS), "p1", {"name": "Double", "intervals": [400, 500]})
    store.emit(path(Collection.KNOCK_PATTERNS))

    assert toggle(controller, Collection.KNOCK_PATTERNS, "p1") is True
    assert store.records(Collection.KNOCK_PATTERNS)["p1"]["blocked"] is True

    pending = controller.entities.request_delete(Collection.KNOCK_PATTERNS, "p1")
    assert pending.prompt == DELETE_PROMPTS[Collection.KNOCK_PATTERNS]
    asyncio.run(controller.entities.confirm_delete(pending.token))
    assert controller.synchronizer.patterns == ()
