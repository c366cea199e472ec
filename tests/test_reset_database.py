import pytest

from academy.db import session as session_module
from academy.models.catalog.formation_model import Formation
from scripts import reset_database


def test_reset_requires_confirmation():
    with pytest.raises(SystemExit):
        reset_database.main([])


def test_reset_recreates_schema_and_seeds(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'reset.db'}"
    try:
        assert reset_database.main(["--yes", "--database-url", url]) == 0
        assert reset_database.main(["--yes", "--database-url", url]) == 0
        with session_module.SessionLocal() as db:
            assert db.query(Formation).count() == 1

        assert reset_database.main(["--yes", "--skip-seed", "--database-url", url]) == 0
        with session_module.SessionLocal() as db:
            assert db.query(Formation).count() == 0
    finally:
        session_module.configure_database(allow_fallback=False)
