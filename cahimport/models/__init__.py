from cahimport.models.content import BlackCardData, ContentPack, DeckSpec
from cahimport.models.errors import (
    CahImportError,
    ConfigurationError,
    DestinationConnectionError,
    FatalInsertionError,
    InvalidIndexWarning,
    InvalidPickWarning,
    MalformedInputError,
    RowConflictWarning,
    TransformWarning,
)
from cahimport.models.records import Card, Deck, LoadReport

__all__ = [
    "BlackCardData",
    "CahImportError",
    "Card",
    "ConfigurationError",
    "ContentPack",
    "Deck",
    "DeckSpec",
    "DestinationConnectionError",
    "FatalInsertionError",
    "InvalidIndexWarning",
    "InvalidPickWarning",
    "LoadReport",
    "MalformedInputError",
    "RowConflictWarning",
    "TransformWarning",
]
