import pytest
from organize_api.core.errors import ConflictError, NotFoundError


def make_fields(**overrides):
    fields = {
        "username": "alice",
        "full_name": "Alice A",
        "email": "alice@example.com",
        "password_hash": "$2b$04$notarealhashnotarealhashnotarealhashnotarealhas",
    }
    fields.update(overrides)
    return fields


def test_create_assigns_id(user_store):
    user = user_store.create(make_fields())

    assert user.id is not None
    assert user_store.find_by_id(user.id).username == "alice"


def test_create_duplicate_username_conflicts(user_store):
    user_store.create(make_fields())

    with pytest.raises(ConflictError) as exc:
        user_store.create(make_fields(email="other@example.com"))

    assert exc.value.field == "username"
    assert len(user_store.find_all()) == 1


def test_create_duplicate_email_conflicts(user_store):
    user_store.create(make_fields())

    with pytest.raises(ConflictError) as exc:
        user_store.create(make_fields(username="alice2"))

    assert exc.value.field == "email"
    assert len(user_store.find_all()) == 1


def test_database_constraint_backs_up_the_explicit_check(user_store, monkeypatch):
    user_store.create(make_fields())
    # Simulate a concurrent insert slipping past the pre-check
    monkeypatch.setattr(user_store, "_check_unique", lambda fields, exclude_id=None: None)

    with pytest.raises(ConflictError):
        user_store.create(make_fields())

    assert len(user_store.find_all()) == 1


def test_find_by_id_missing(user_store):
    with pytest.raises(NotFoundError) as exc:
        user_store.find_by_id(999)
    assert "999" in str(exc.value)


def test_find_all_is_ordered_by_id(user_store):
    ids = [user_store.create(make_fields(username=name, email=f"{name}@example.com")).id
           for name in ("carol", "alice", "bob")]

    assert [user.id for user in user_store.find_all()] == sorted(ids)


def test_find_by_email_and_username(user_store):
    user = user_store.create(make_fields())

    assert user_store.find_by_email("alice@example.com").id == user.id
    assert user_store.find_by_username("alice").id == user.id
    assert user_store.find_by_email("nobody@example.com") is None
    assert user_store.find_by_username("nobody") is None


def test_update_changes_only_supplied_fields(user_store):
    user = user_store.create(make_fields())

    updated = user_store.update(user.id, {"username": "new"})

    assert updated.username == "new"
    assert updated.full_name == "Alice A"
    assert updated.email == "alice@example.com"


def test_update_with_no_fields_is_a_no_op(user_store):
    user = user_store.create(make_fields())

    updated = user_store.update(user.id, {})

    assert updated.id == user.id
    assert updated.username == "alice"


def test_update_cannot_touch_password_hash(user_store):
    user = user_store.create(make_fields())
    original_hash = user.password_hash

    updated = user_store.update(user.id, {"password_hash": "plaintext"})

    assert updated.password_hash == original_hash


def test_update_to_taken_username_conflicts_and_changes_nothing(user_store):
    user_store.create(make_fields())
    bob = user_store.create(make_fields(username="bob", email="bob@example.com"))

    with pytest.raises(ConflictError):
        user_store.update(bob.id, {"username": "alice", "full_name": "Bob B"})

    reloaded = user_store.find_by_id(bob.id)
    assert reloaded.username == "bob"
    assert reloaded.full_name == "Alice A"


def test_update_keeping_own_username_is_allowed(user_store):
    user = user_store.create(make_fields())

    updated = user_store.update(user.id, {"username": "alice", "full_name": "Alice B"})

    assert updated.full_name == "Alice B"


def test_update_missing_user(user_store):
    with pytest.raises(NotFoundError):
        user_store.update(999, {"username": "new"})


def test_delete_removes_user(user_store):
    user = user_store.create(make_fields())

    user_store.delete(user.id)

    with pytest.raises(NotFoundError):
        user_store.find_by_id(user.id)
    with pytest.raises(NotFoundError):
        user_store.delete(user.id)


def test_ids_are_not_reused_after_delete(user_store):
    first = user_store.create(make_fields())
    first_id = first.id
    user_store.delete(first_id)

    second = user_store.create(make_fields())

    assert second.id > first_id


@pytest.mark.parametrize("user_id", [0, -1, 2**31, 10**20])
def test_out_of_range_ids_are_not_found(user_store, user_id):
    with pytest.raises(NotFoundError) as exc:
        user_store.find_by_id(user_id)
    assert str(user_id) in str(exc.value)

    with pytest.raises(NotFoundError):
        user_store.delete(user_id)
    with pytest.raises(NotFoundError):
        user_store.update(user_id, {"username": "new"})
