import pytest

from gatekeep import Caller, InMemoryDriver, Manager, SQLiteDriver


@pytest.fixture(params=["inmemory", "sqlite"])
def driver(request, tmp_path):
    if request.param == "sqlite":
        sqlite_driver = SQLiteDriver(tmp_path / "permissions.db")
        yield sqlite_driver
        sqlite_driver.close()
    else:
        yield InMemoryDriver()


@pytest.fixture
def manager(driver):
    return Manager(driver)


@pytest.fixture
def caller():
    return Caller(caller_id=1)


@pytest.fixture
def lock(manager, caller):
    """Lock for the default caller, bound so the caller helpers work."""
    caller_lock = manager.caller(caller)
    caller.set_lock(caller_lock)
    return caller_lock


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    monkeypatch.delenv("GATEKEEP_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("GATEKEEP_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
