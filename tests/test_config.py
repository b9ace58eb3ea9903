import pytest

from equiplend.config import load_settings
from equiplend.services import build_manager, open_store
from equiplend.store import JsonFileStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("EQUIPLEND_STORE", "EQUIPLEND_DB_URL", "EQUIPLEND_BACKEND",
                "EQUIPLEND_MAX_DAYS_AHEAD", "EQUIPLEND_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    s = load_settings()
    assert s.backend == "json"
    assert s.db_url is None
    assert s.max_days_ahead == 90
    assert s.log_level == "INFO"


def test_sql_backend_defaults_to_sqlite_in_store_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("EQUIPLEND_STORE", str(tmp_path))
    monkeypatch.setenv("EQUIPLEND_BACKEND", "SQL")
    s = load_settings()
    assert s.backend == "sql"
    assert s.db_url.startswith("sqlite:///") and s.db_url.endswith("equiplend.db")


def test_db_url_implies_sql(monkeypatch):
    monkeypatch.setenv("EQUIPLEND_DB_URL", "sqlite:///x.db")
    assert load_settings().backend == "sql"


def test_bad_values(monkeypatch):
    monkeypatch.setenv("EQUIPLEND_MAX_DAYS_AHEAD", "soon")
    assert load_settings().max_days_ahead == 90
    monkeypatch.setenv("EQUIPLEND_BACKEND", "redis")
    with pytest.raises(ValueError):
        load_settings()


def test_json_store_is_seeded_on_first_build(monkeypatch, tmp_path):
    monkeypatch.setenv("EQUIPLEND_STORE", str(tmp_path))
    settings = load_settings()
    store = open_store(settings)
    assert isinstance(store, JsonFileStore)
    manager = build_manager(store)
    assert len(manager.registry.list()) == 6
    build_manager(store)
    assert len(manager.registry.list()) == 6


def test_zero_horizon_disables_picker_limit(monkeypatch):
    monkeypatch.setenv("EQUIPLEND_MAX_DAYS_AHEAD", "0")
    assert load_settings().max_days_ahead == 0
