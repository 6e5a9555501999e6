"""Tests for configuration loading."""

from gatekeep import Caller, InMemoryDriver, Manager, SQLiteDriver
from gatekeep.config import load_config


def test_load_config_defaults():
    config = load_config()
    assert config.storage.backend == "inmemory"
    assert config.aliases == {}
    assert config.resolved_database_url() is None


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.yaml"
    config_path.write_text(
        f"""
storage:
  backend: sqlite
  path: {tmp_path / "perms.db"}
aliases:
  manage: [create, read, update, delete]
roles:
  editor: [user]
"""
    )
    monkeypatch.setenv("GATEKEEP_CONFIG", str(config_path))

    config = load_config()
    assert config.storage.backend == "sqlite"
    assert config.aliases["manage"] == ["create", "read", "update", "delete"]
    assert config.roles == {"editor": ["user"]}
    assert config.resolved_database_url() == f"sqlite://{tmp_path / 'perms.db'}"


def test_database_url_env_overrides_config(tmp_path, monkeypatch):
    (tmp_path / "gatekeep.yaml").write_text("database_url: sqlite://ignored.db\n")
    monkeypatch.setenv("GATEKEEP_DATABASE_URL", "sqlite://override.db")

    config = load_config()
    assert config.resolved_database_url() == "sqlite://override.db"


def test_manager_from_config_preloads_registries(tmp_path):
    config_path = tmp_path / "gatekeep.yaml"
    config_path.write_text(
        """
aliases:
  manage: [create, update]
roles:
  editor: [user]
  admin: [editor]
"""
    )

    manager = Manager.from_config(load_config(str(config_path)))
    assert isinstance(manager.driver, InMemoryDriver)
    assert manager.aliases.aliases_for("update") == ["manage"]
    assert manager.roles.ancestors("admin") == ["editor", "user"]

    manager.allow_role("user", "manage", "pages")
    lock = manager.caller(Caller(caller_id=1, roles=["admin"]))
    assert lock.can("update", "pages")
    assert lock.can("delete", "pages") is False


def test_manager_from_config_uses_sqlite(tmp_path):
    (tmp_path / "gatekeep.yaml").write_text(
        f"storage:\n  backend: sqlite\n  path: {tmp_path / 'perms.db'}\n"
    )

    manager = Manager.from_config()
    assert isinstance(manager.driver, SQLiteDriver)
    manager.caller(Caller(caller_id=1)).allow("read")
    manager.driver.close()

    reopened = Manager(SQLiteDriver(tmp_path / "perms.db"))
    assert reopened.caller(Caller(caller_id=1)).can("read")
    reopened.driver.close()
