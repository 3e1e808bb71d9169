"""The initial Alembic migration creates exactly the tables the ORM maps."""

import importlib.util
import re
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from taskquest.db import models  # noqa: F401
from taskquest.db.base import Base

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "001_initial_schema.py"


def _load_migration(monkeypatch: pytest.MonkeyPatch) -> tuple[object, MagicMock]:
    spec = importlib.util.spec_from_file_location("initial_schema", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    op = MagicMock()
    monkeypatch.setattr(module, "op", op)
    return module, op


def _statements(op: MagicMock) -> list[str]:
    return [" ".join(c.args[0].split()) for c in op.execute.call_args_list]


def test_upgrade_creates_every_mapped_table(monkeypatch: pytest.MonkeyPatch) -> None:
    module, op = _load_migration(monkeypatch)
    module.upgrade()
    created = {
        m.group(1)
        for sql in _statements(op)
        if (m := re.match(r"CREATE TABLE IF NOT EXISTS (\w+)", sql))
    }
    assert created == set(Base.metadata.tables)


def test_downgrade_drops_every_mapped_table(monkeypatch: pytest.MonkeyPatch) -> None:
    module, op = _load_migration(monkeypatch)
    module.downgrade()
    dropped = {sql.split()[4] for sql in _statements(op)}
    assert dropped == set(Base.metadata.tables)


def test_tag_names_unique_per_user_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    module, op = _load_migration(monkeypatch)
    module.upgrade()
    statements = _statements(op)
    for table in ("categories", "labels"):
        assert any(f"ON {table}(user_id, LOWER(name))" in sql and "UNIQUE" in sql for sql in statements)
