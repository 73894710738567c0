from cahimport.db.conflicts import InsertOutcome, classifier_for, classify_insert_error
from cahimport.db.database import check_connection, create_engine
from cahimport.db.loader import insert_cards, insert_decks, load
from cahimport.db.schema import CARDS_TABLE, DECKS_TABLE, PackTables, build_tables, ensure_tables

__all__ = [
    "CARDS_TABLE",
    "DECKS_TABLE",
    "InsertOutcome",
    "PackTables",
    "build_tables",
    "check_connection",
    "classifier_for",
    "classify_insert_error",
    "create_engine",
    "ensure_tables",
    "insert_cards",
    "insert_decks",
    "load",
]
