import pytest

import saypi.config as config
from saypi.db import _get_schema_revisions, init_db
from saypi.errors import HasDependents
from saypi.services.builtins import default_catalog
from saypi.services.repository import Repository


@pytest.fixture
def sqlite_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DB_BACKEND", "sqlite")
    monkeypatch.setattr(config, "DATABASE_URL", None)
    monkeypatch.setattr(config, "SQLITE_PATH", str(tmp_path / "migrated.sqlite"))
    monkeypatch.setattr(config, "USER_SECRET_HEX", "00ff")
    monkeypatch.setattr(config, "USER_SECRET", b"")
    monkeypatch.setattr(config, "AUTO_MIGRATE_ON_STARTUP", True)
    return tmp_path


def test_validate_derives_sqlite_url_and_secret(sqlite_config):
    config.validate_and_prepare_config()
    assert config.DATABASE_URL == f"sqlite:///{sqlite_config / 'migrated.sqlite'}"
    assert config.USER_SECRET == b"\x00\xff"


def test_validate_requires_secret(sqlite_config, monkeypatch):
    monkeypatch.setattr(config, "USER_SECRET_HEX", "")
    monkeypatch.setattr(config, "ALLOW_INSECURE_SECRET", False)
    with pytest.raises(RuntimeError, match="SAYPI_USER_SECRET"):
        config.validate_and_prepare_config()


def test_validate_allows_insecure_secret_when_enabled(sqlite_config, monkeypatch):
    monkeypatch.setattr(config, "USER_SECRET_HEX", "")
    monkeypatch.setattr(config, "ALLOW_INSECURE_SECRET", True)
    config.validate_and_prepare_config()
    assert config.USER_SECRET == config.INSECURE_DEV_SECRET


def test_validate_rejects_mismatched_backend(sqlite_config, monkeypatch):
    monkeypatch.setattr(config, "DATABASE_URL", "postgresql://localhost/saypi")
    with pytest.raises(RuntimeError, match="Configuration invalid"):
        config.validate_and_prepare_config()


def test_init_db_migrates_to_head(sqlite_config):
    database = init_db()
    try:
        current_rev, head_rev = _get_schema_revisions(database.engine)
        assert current_rev == head_rev == "0001_initial_schema"

        repository = Repository(database, default_catalog())
        repository.set_mood("u", "happy", "^^", "  ")
        conversation = repository.new_conversation("u", "chat")
        repository.insert_line(
            "u",
            conversation.public_id,
            animal="default",
            think=False,
            mood_name="happy",
            text="hi",
        )
        with pytest.raises(HasDependents):
            repository.delete_mood("u", "happy")

        # Idempotent on an up-to-date schema.
        init_db().dispose()
    finally:
        database.dispose()
