"""Tests for the deck/card load protocol against a real SQLite database."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine

from cahimport.config import DbType
from cahimport.db.conflicts import InsertOutcome, classifier_for
from cahimport.db.loader import insert_cards, load
from cahimport.db.schema import PackTables
from cahimport.models.errors import FatalInsertionError, RowConflictWarning
from cahimport.models.records import Card, Deck, LoadReport

classify = classifier_for(DbType.SQLITE)


def make_cards(deck_id: int, count: int, prefix: str = "card") -> list[Card]:
    return [Card(id=f"{prefix}-{deck_id}-{i}", deck_id=deck_id, text=f"Card {i}") for i in range(count)]


async def count_rows(engine: AsyncEngine, tables: PackTables) -> tuple[int, int]:
    async with engine.connect() as conn:
        decks = (await conn.execute(select(func.count()).select_from(tables.decks))).scalar_one()
        cards = (await conn.execute(select(func.count()).select_from(tables.cards))).scalar_one()
    return decks, cards


@pytest.fixture
def decks() -> list[Deck]:
    return [Deck(id=1, name="Base", official=True), Deck(id=2, name="Extra", official=False)]


class TestLoad:
    async def test_inserts_decks_and_cards(self, sqlite_engine, tables, decks) -> None:
        cards = make_cards(1, 3) + [Card(id="black-2-0", deck_id=2, text="___?", pick=2)]

        async with sqlite_engine.begin() as conn:
            report = await load(conn, tables, decks, cards, classify)

        assert report.decks_inserted == 2
        assert report.cards_inserted == 4
        assert report.conflicts == []
        assert await count_rows(sqlite_engine, tables) == (2, 4)

        async with sqlite_engine.connect() as conn:
            row = (
                await conn.execute(select(tables.cards).where(tables.cards.c.id == "black-2-0"))
            ).one()
        assert row.deckId == 2
        assert row.pick == 2

    async def test_rerun_inserts_nothing(self, sqlite_engine, tables, decks) -> None:
        cards = make_cards(1, 120)

        async with sqlite_engine.begin() as conn:
            await load(conn, tables, decks, cards, classify)
        async with sqlite_engine.begin() as conn:
            report = await load(conn, tables, decks, cards, classify)

        assert report.rows_inserted == 0
        assert report.decks_skipped == 2
        assert report.cards_skipped == 120
        assert all(isinstance(c, RowConflictWarning) for c in report.conflicts)
        assert await count_rows(sqlite_engine, tables) == (2, 120)

    async def test_partial_prior_run_is_completed(self, sqlite_engine, tables, decks) -> None:
        cards = make_cards(1, 10)
        async with sqlite_engine.begin() as conn:
            await load(conn, tables, decks[:1], cards[:4], classify)

        async with sqlite_engine.begin() as conn:
            report = await load(conn, tables, decks, cards, classify)

        assert report.decks_inserted == 1
        assert report.decks_skipped == 1
        assert report.cards_inserted == 6
        assert report.cards_skipped == 4
        assert await count_rows(sqlite_engine, tables) == (2, 10)

    async def test_duplicate_card_in_same_run_is_skipped(self, sqlite_engine, tables, decks) -> None:
        card = Card(id="same", deck_id=1, text="Bananas")
        twin = Card(id="same", deck_id=2, text="Bananas on toast")

        async with sqlite_engine.begin() as conn:
            report = await load(conn, tables, decks, [card, twin], classify)

        assert report.cards_inserted == 1
        assert report.conflicts == [RowConflictWarning("card", "same")]

    async def test_no_cards(self, sqlite_engine, tables, decks, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="cahimport.db.loader"):
            async with sqlite_engine.begin() as conn:
                report = await load(conn, tables, decks, [], classify)

        assert report.decks_inserted == 2
        assert report.cards_inserted == 0
        assert "No cards found to insert." in caplog.text

    async def test_card_failure_rolls_back_decks(self, sqlite_engine, tables, decks) -> None:
        """A non-conflict card failure leaves no rows from the run."""
        orphan = Card(id="orphan", deck_id=404, text="No such deck")

        with pytest.raises(FatalInsertionError) as exc_info:
            async with sqlite_engine.begin() as conn:
                await load(conn, tables, decks, make_cards(1, 3) + [orphan], classify)

        assert exc_info.value.entity == "card batch"
        assert await count_rows(sqlite_engine, tables) == (0, 0)

    async def test_fatal_deck_error(self, sqlite_engine, tables) -> None:
        bad = Deck(id=5, name=None, official=True)  # type: ignore[arg-type]

        with pytest.raises(FatalInsertionError) as exc_info:
            async with sqlite_engine.begin() as conn:
                await load(conn, tables, [Deck(id=4, name="Ok", official=True), bad], [], classify)

        assert exc_info.value.entity == "deck"
        assert exc_info.value.key == 5
        assert await count_rows(sqlite_engine, tables) == (0, 0)


def mock_connection() -> AsyncMock:
    """Connection whose savepoints are no-ops that let exceptions through."""
    conn = AsyncMock()
    conn.begin_nested = MagicMock()
    conn.begin_nested.return_value.__aenter__.return_value = None
    conn.begin_nested.return_value.__aexit__.return_value = False
    return conn


class TestInsertCards:
    async def test_batches_of_fifty(self, tables) -> None:
        conn = mock_connection()
        report = LoadReport()

        await insert_cards(conn, tables.cards, make_cards(1, 120), classify, report)

        sizes = [len(call.args[1]) for call in conn.execute.await_args_list]
        assert sizes == [50, 50, 20]
        assert report.cards_inserted == 120

    async def test_custom_batch_size(self, tables) -> None:
        conn = mock_connection()

        await insert_cards(conn, tables.cards, make_cards(1, 5), classify, LoadReport(), batch_size=2)

        assert conn.execute.await_count == 3

    async def test_non_integrity_failure_is_fatal(self, tables) -> None:
        conn = mock_connection()
        conn.execute.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))

        with pytest.raises(FatalInsertionError, match="disk I/O error"):
            await insert_cards(conn, tables.cards, make_cards(1, 2), classify, LoadReport())

    async def test_classifier_decides(self, sqlite_engine, tables, decks) -> None:
        """The loader relies only on the classifier's verdict."""
        async with sqlite_engine.begin() as conn:
            await load(conn, tables, decks, [], classify)

        with pytest.raises(FatalInsertionError):
            async with sqlite_engine.begin() as conn:
                await load(conn, tables, decks, [], lambda _e: InsertOutcome.FATAL)
