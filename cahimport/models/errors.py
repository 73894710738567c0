"""
Error taxonomy for content pack imports.

Fatal conditions are exceptions derived from CahImportError and unwind to the
CLI, rolling back any open transaction on the way. Non-fatal conditions are
plain records: they are logged, collected on the result, and processing
continues.
"""

from dataclasses import dataclass


class CahImportError(Exception):
    """Base class for every fatal import error."""

    pass


class MalformedInputError(CahImportError):
    """The input document could not be read or structurally decoded."""

    pass


class ConfigurationError(CahImportError):
    """Required destination parameters are missing for the chosen store kind."""

    pass


class DestinationConnectionError(CahImportError):
    """The destination database is unreachable or failed its health check."""

    pass


class FatalInsertionError(CahImportError):
    """
    A destination-store failure that is not a row conflict.

    Raised inside the unit of work, so the whole load is rolled back.
    An incompatible pre-existing Decks/Cards table also surfaces here.

    Attributes:
        entity: What was being inserted ("deck", "card", "card batch")
        key: Identifying key of the row or batch
    """

    def __init__(self, entity: str, key: object, cause: BaseException):
        self.entity = entity
        self.key = key
        super().__init__(f"Failed to insert {entity} {key}: {cause}")


@dataclass(frozen=True, slots=True)
class RowConflictWarning:
    """A row's primary key already exists; the row was skipped."""

    entity: str
    key: object

    @property
    def message(self) -> str:
        return f"{self.entity.capitalize()} {self.key} already present, skipped"


@dataclass(frozen=True, slots=True)
class InvalidIndexWarning:
    """A deck references a pool index outside the pool; the entry was skipped."""

    deck_id: int
    deck_name: str
    color: str
    index: int
    pool_size: int

    @property
    def message(self) -> str:
        if self.pool_size == 0:
            bounds = f"The {self.color} pool is empty."
        else:
            bounds = f"Valid range: 0..{self.pool_size - 1}."
        return (
            f"Deck '{self.deck_name}' (ID: {self.deck_id}) has an invalid {self.color} "
            f"card index: {self.index}. {bounds} Skipping this card."
        )


@dataclass(frozen=True, slots=True)
class InvalidPickWarning:
    """A black card demands an unsupported number of responses; the entry was skipped."""

    deck_id: int
    deck_name: str
    index: int
    pick: int

    @property
    def message(self) -> str:
        return (
            f"Deck '{self.deck_name}' (ID: {self.deck_id}) references black card {self.index} "
            f"with pick={self.pick}; expected 1, 2 or 3. Skipping this card."
        )


TransformWarning = InvalidIndexWarning | InvalidPickWarning
