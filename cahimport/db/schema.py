"""
Destination table definitions.

Tables are built per run on a fresh MetaData so the schema qualifier can come
from configuration. Provisioning only ever creates missing tables.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.ext.asyncio import AsyncConnection

logger = logging.getLogger(__name__)

DECKS_TABLE = "Decks"
CARDS_TABLE = "Cards"


@dataclass(frozen=True)
class PackTables:
    """The Decks and Cards tables bound to one schema."""

    metadata: MetaData
    decks: Table
    cards: Table


def build_tables(schema: str | None = None) -> PackTables:
    """
    Define the Decks and Cards tables.

    Args:
        schema: Schema qualifier, or None for engines without schemas
    """
    metadata = MetaData(schema=schema)

    decks = Table(
        DECKS_TABLE,
        metadata,
        # Caller-supplied, never generated
        Column("id", Integer, primary_key=True, autoincrement=False),
        Column("name", String(255), nullable=False),
        Column("official", Boolean, nullable=False),
    )

    deck_ref = f"{schema}.{DECKS_TABLE}.id" if schema else f"{DECKS_TABLE}.id"
    cards = Table(
        CARDS_TABLE,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("deckId", Integer, ForeignKey(deck_ref), nullable=False),
        Column("text", Text, nullable=False),
        Column("pick", Integer, nullable=True),
    )

    return PackTables(metadata=metadata, decks=decks, cards=cards)


async def ensure_tables(conn: AsyncConnection, tables: PackTables) -> None:
    """
    Create Decks and Cards if they do not exist.

    Existing tables with the same names are left untouched; an incompatible
    legacy table only shows up later as an insertion failure.
    """
    for table in (tables.decks, tables.cards):
        logger.info("Ensuring table %s exists...", table.fullname)

    await conn.run_sync(tables.metadata.create_all, checkfirst=True)
    logger.info("Tables %s and %s are ready.", tables.decks.fullname, tables.cards.fullname)
