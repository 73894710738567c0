"""
Deck and card loading.

Runs inside one caller-owned transaction. Every insert attempt is wrapped in
a SAVEPOINT, so a duplicate key only undoes that attempt while any other
failure propagates and rolls back the whole unit of work.

Decks are all attempted before any card. Cards go in fixed-size batches; a
batch that hits a duplicate key is replayed row by row so that conflicts are
tolerated for cards exactly as they are for decks.
"""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Table
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncConnection

from cahimport.config import CARD_BATCH_SIZE
from cahimport.db.conflicts import InsertErrorClassifier, InsertOutcome
from cahimport.db.schema import PackTables
from cahimport.models.errors import FatalInsertionError, RowConflictWarning
from cahimport.models.records import Card, Deck, LoadReport

logger = logging.getLogger(__name__)


async def _insert_row(
    conn: AsyncConnection,
    table: Table,
    row: dict[str, Any],
    entity: str,
    classify: InsertErrorClassifier,
) -> RowConflictWarning | None:
    """
    Insert one row in its own savepoint.

    Returns:
        None when inserted, a RowConflictWarning when the key already exists.

    Raises:
        FatalInsertionError: For any failure other than a duplicate key
    """
    key = row["id"]
    try:
        async with conn.begin_nested():
            await conn.execute(table.insert(), row)
    except DBAPIError as e:
        if classify(e) is InsertOutcome.CONFLICT:
            conflict = RowConflictWarning(entity, key)
            logger.warning(conflict.message)
            return conflict
        logger.error("Error inserting %s %s: %s", entity, key, e)
        raise FatalInsertionError(entity, key, e) from e
    return None


async def insert_decks(
    conn: AsyncConnection,
    table: Table,
    decks: Sequence[Deck],
    classify: InsertErrorClassifier,
    report: LoadReport,
) -> None:
    """Attempt every deck independently, skipping ones already present."""
    logger.info("Starting deck insertion...")
    for deck in decks:
        conflict = await _insert_row(conn, table, deck.as_row(), "deck", classify)
        if conflict is None:
            report.decks_inserted += 1
            logger.info("Deck '%s' (ID: %d) inserted.", deck.name, deck.id)
        else:
            report.record_conflict(conflict)
    logger.info("All deck insertion attempts completed.")


async def _insert_card_batch(
    conn: AsyncConnection,
    table: Table,
    batch: Sequence[Card],
    classify: InsertErrorClassifier,
    report: LoadReport,
) -> None:
    rows = [card.as_row() for card in batch]
    try:
        async with conn.begin_nested():
            await conn.execute(table.insert(), rows)
    except DBAPIError as e:
        if classify(e) is not InsertOutcome.CONFLICT:
            key = f"{batch[0].id}..{batch[-1].id}"
            logger.error("Error inserting card batch %s: %s", key, e)
            raise FatalInsertionError("card batch", key, e) from e

        logger.debug("Card batch hit an existing key, inserting row by row")
        for row in rows:
            conflict = await _insert_row(conn, table, row, "card", classify)
            if conflict is None:
                report.cards_inserted += 1
            else:
                report.record_conflict(conflict)
        return

    report.cards_inserted += len(rows)


async def insert_cards(
    conn: AsyncConnection,
    table: Table,
    cards: Sequence[Card],
    classify: InsertErrorClassifier,
    report: LoadReport,
    batch_size: int = CARD_BATCH_SIZE,
) -> None:
    """Insert cards in sequential batches of batch_size."""
    if not cards:
        logger.info("No cards found to insert.")
        return

    logger.info("Attempting to insert %d cards in total...", len(cards))
    for start in range(0, len(cards), batch_size):
        await _insert_card_batch(conn, table, cards[start : start + batch_size], classify, report)
    logger.info("%d cards processed for insertion.", len(cards))


async def load(
    conn: AsyncConnection,
    tables: PackTables,
    decks: Sequence[Deck],
    cards: Sequence[Card],
    classify: InsertErrorClassifier,
    batch_size: int = CARD_BATCH_SIZE,
) -> LoadReport:
    """
    Load decks, then cards, within the transaction open on conn.

    Args:
        conn: Connection with an open transaction (e.g. from engine.begin())
        tables: Destination tables
        decks: Deck rows
        cards: Card rows, each referencing one of decks
        classify: Store-specific insert error classifier
        batch_size: Cards per multi-row insert

    Returns:
        LoadReport with inserted/skipped counts.

    Raises:
        FatalInsertionError: On any non-conflict failure. The caller's
            transaction context then rolls back every row from this run.
    """
    report = LoadReport()
    await insert_decks(conn, tables.decks, decks, classify, report)
    await insert_cards(conn, tables.cards, cards, classify, report, batch_size=batch_size)
    return report
