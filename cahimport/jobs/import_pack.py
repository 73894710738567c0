"""
Import a compact content pack into the Decks and Cards tables.

Safe to re-run: decks and cards already present are skipped, and any other
failure rolls back everything written by the run.

Usage:
    cahimport -d sqlite -s ./cah.sqlite -i ./cah-cards-compact.json
    python -m cahimport.jobs.import_pack -d postgresql -c postgresql://... --db-schema public
"""

import argparse
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from cahimport.config import (
    CARD_BATCH_SIZE,
    DbType,
    Settings,
    effective_schema,
    validate_destination,
)
from cahimport.db.conflicts import classifier_for
from cahimport.db.database import check_connection, create_engine
from cahimport.db.loader import load
from cahimport.db.schema import build_tables, ensure_tables
from cahimport.models.errors import CahImportError, ConfigurationError, TransformWarning
from cahimport.models.records import LoadReport
from cahimport.parsers.content_pack import read_content_pack
from cahimport.services.transformer import transform_pack

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of a full import run."""

    report: LoadReport
    warnings: list[TransformWarning] = field(default_factory=list)


async def run_import(settings: Settings) -> ImportResult:
    """
    Run the whole pipeline: connect, provision, read, transform, load.

    Raises:
        ConfigurationError: Destination parameters missing
        DestinationConnectionError: Health check failed
        MalformedInputError: Input file unreadable or malformed
        FatalInsertionError: Non-conflict insert failure (run rolled back)
    """
    logger.info("Input file: %s", settings.input_file)
    logger.info("Database type: %s", settings.db_type.value if settings.db_type else None)
    if settings.sqlite_file:
        logger.info("SQLite file: %s", settings.sqlite_file)

    db_type = validate_destination(settings)
    engine = create_engine(settings)
    try:
        await check_connection(engine)

        schema = effective_schema(settings)
        logger.info("Database schema: %s", schema or "(none)")
        tables = build_tables(schema)
        async with engine.begin() as conn:
            await ensure_tables(conn, tables)

        pack = read_content_pack(settings.input_file)
        transformed = transform_pack(pack)

        classify = classifier_for(db_type)
        async with engine.begin() as conn:
            report = await load(
                conn,
                tables,
                transformed.decks,
                transformed.cards,
                classify,
                batch_size=CARD_BATCH_SIZE,
            )
        logger.info("Data insertion transaction committed.")
    finally:
        await engine.dispose()
        logger.info("Database connection closed.")

    return ImportResult(report=report, warnings=transformed.warnings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import a compact card pack JSON file into a relational database"
    )
    parser.add_argument(
        "-i",
        "--input-file",
        type=Path,
        help="Path to the input JSON file (default: ./cah-cards-compact.json)",
    )
    parser.add_argument(
        "-d",
        "--db-type",
        choices=[t.value for t in DbType],
        help="Type of the target database",
    )
    parser.add_argument(
        "-c",
        "--connection-string",
        help="Database connection string (required for sqlserver and postgresql)",
    )
    parser.add_argument(
        "-s",
        "--sqlite-file",
        type=Path,
        help="Path to the SQLite database file (sqlite without --connection-string)",
    )
    parser.add_argument(
        "--db-schema",
        help='Database schema to use, e.g. dbo or public (default: "dbo"; ignored for sqlite)',
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Echo SQL statements and log at DEBUG level",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """
    Environment settings with any explicitly passed CLI options applied on top.

    Raises:
        ConfigurationError: If an option or CAH_* variable has an invalid value
    """
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = settings_from_args(args)
        if settings.debug:
            logging.getLogger().setLevel(logging.DEBUG)
        result = asyncio.run(run_import(settings))
    except (CahImportError, SQLAlchemyError, OSError) as e:
        logger.error("Import failed: %s", e)
        return 1

    report = result.report
    logger.info(
        "Data import completed successfully: %d decks inserted (%d already present), "
        "%d cards inserted (%d already present), %d card entries skipped.",
        report.decks_inserted,
        report.decks_skipped,
        report.cards_inserted,
        report.cards_skipped,
        len(result.warnings),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
