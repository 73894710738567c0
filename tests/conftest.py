import json
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from cahimport.config import DbType, Settings
from cahimport.db.database import create_engine
from cahimport.db.schema import PackTables, build_tables, ensure_tables


@pytest.fixture
def sample_pack_data() -> dict[str, Any]:
    """Minimal content pack with one deck referencing every pool entry."""
    return {
        "white": ["Bananas", "A rock"],
        "black": [{"text": "___ is great.", "pick": 1}],
        "metadata": {
            "1": {"id": 1, "name": "Base", "official": True, "white": [0, 1], "black": [0]},
        },
    }


@pytest.fixture
def sample_pack_file(tmp_path: Path, sample_pack_data: dict[str, Any]) -> Path:
    path = tmp_path / "cah-cards-compact.json"
    path.write_text(json.dumps(sample_pack_data), encoding="utf-8")
    return path


@pytest.fixture
def sqlite_settings(tmp_path: Path, sample_pack_file: Path) -> Settings:
    """Settings pointing at a fresh SQLite file database."""
    return Settings(
        input_file=sample_pack_file,
        db_type=DbType.SQLITE,
        sqlite_file=tmp_path / "cah.sqlite",
    )


@pytest.fixture
async def sqlite_engine(sqlite_settings: Settings):
    """Async engine on the SQLite file, with savepoint and FK hooks installed."""
    engine = create_engine(sqlite_settings)
    yield engine
    await engine.dispose()


@pytest.fixture
async def tables(sqlite_engine: AsyncEngine) -> PackTables:
    """Provisioned Decks and Cards tables."""
    pack_tables = build_tables(None)
    async with sqlite_engine.begin() as conn:
        await ensure_tables(conn, pack_tables)
    return pack_tables
