"""Tests for the manager facade and role locks."""

import pytest

from gatekeep import Caller, CycleDetectedError, InMemoryDriver, Manager, Role, RoleLock


def test_manager_uses_injected_collaborators():
    driver = InMemoryDriver()
    manager = Manager(driver)

    assert manager.driver is driver
    assert manager.resolver.driver is driver
    assert manager.resolver.aliases is manager.aliases
    assert manager.resolver.roles is manager.roles


def test_independent_managers_do_not_share_state():
    first, second = Manager(), Manager()
    first.alias("manage", ["read"])
    first.set_role("editor")

    assert "manage" not in second.aliases
    assert "editor" not in second.roles


def test_role_lock_registers_unknown_roles():
    manager = Manager()
    lock = manager.role("editor")

    assert isinstance(lock, RoleLock)
    assert lock.name == "editor"
    assert "editor" in manager.roles
    assert manager.role(Role(name="editor")).principal == Role(name="editor")


def test_role_lock_inherit_and_toggle():
    manager = Manager()
    manager.role("user").allow("read", "pages")
    editor = manager.role("editor")
    editor.inherit("user")

    assert editor.can("read", "pages")

    editor.toggle("read", "pages")
    assert editor.can("read", "pages") is False
    assert manager.role("user").can("read", "pages")

    with pytest.raises(CycleDetectedError):
        manager.role("user").inherit("editor")


def test_caller_lock_set_role_assigns_or_inherits():
    manager = Manager()
    caller = Caller(caller_id=1, roles=["guest"])
    lock = manager.caller(caller)

    lock.set_role(["editor", "writer"])
    lock.set_role("admin", "editor")

    assert lock.roles == ["guest", "editor", "writer"]
    assert manager.roles.inherited("admin") == ["editor"]

    manager.unassign_roles(caller, "writer")
    assert lock.roles == ["guest", "editor"]


def test_role_assignments_follow_caller_identity():
    manager = Manager()
    manager.allow_role("editor", "publish")
    manager.assign_roles(Caller(caller_id=1), "editor")

    assert manager.caller(Caller(caller_id=1)).can("publish")
    assert manager.caller(Caller(caller_id=2)).can("publish") is False
    assert manager.caller(Caller(caller_id=1, caller_type="service")).can("publish") is False


def test_caller_roles_can_change_over_time():
    manager = Manager()
    manager.allow_role("editor", "publish")
    caller = Caller(caller_id=1)
    lock = manager.caller(caller)

    assert lock.can("publish") is False
    caller.roles.append("editor")
    assert lock.can("publish")


class StorageDown(Exception):
    pass


class UnavailableDriver(InMemoryDriver):
    def list_records(self, principal):
        raise StorageDown("storage unavailable")

    def replace_records(self, principal, records):
        raise StorageDown("storage unavailable")


def test_storage_errors_propagate_unchanged():
    lock = Manager(UnavailableDriver()).caller(Caller(caller_id=1))

    with pytest.raises(StorageDown):
        lock.can("read")
    with pytest.raises(StorageDown):
        lock.allow("read", "pages")
    with pytest.raises(StorageDown):
        lock.toggle("read", "pages")


def test_caller_keys_keep_types_and_ids_apart():
    assert Caller(caller_id=1).key != Caller(caller_id="1").key
    assert (
        Caller(caller_type="a:b", caller_id="c").key
        != Caller(caller_type="a", caller_id="b:c").key
    )

    manager = Manager()
    manager.caller(Caller(caller_id=1)).allow("read")

    assert manager.caller(Caller(caller_id=1)).can("read")
    assert manager.caller(Caller(caller_id="1")).can("read") is False
