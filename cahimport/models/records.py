from dataclasses import dataclass, field
from typing import Any

from cahimport.models.errors import RowConflictWarning


@dataclass(frozen=True, slots=True)
class Deck:
    """
    A row of the Decks table.

    Attributes:
        id: Caller-supplied primary key, taken verbatim from the input
        name: Deck name
        official: Whether the deck is an official release
    """

    id: int
    name: str
    official: bool

    def as_row(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "official": self.official}


@dataclass(frozen=True, slots=True)
class Card:
    """
    A row of the Cards table.

    Attributes:
        id: Content-derived UUID string
        deck_id: Owning deck
        text: Card text
        pick: Responses demanded (1-3) for black cards, None for white cards
    """

    id: str
    deck_id: int
    text: str
    pick: int | None = None

    @property
    def is_white(self) -> bool:
        return self.pick is None

    def as_row(self) -> dict[str, Any]:
        return {"id": self.id, "deckId": self.deck_id, "text": self.text, "pick": self.pick}


@dataclass
class LoadReport:
    """Outcome of one load run."""

    decks_inserted: int = 0
    decks_skipped: int = 0
    cards_inserted: int = 0
    cards_skipped: int = 0
    conflicts: list[RowConflictWarning] = field(default_factory=list)

    def record_conflict(self, conflict: RowConflictWarning) -> None:
        self.conflicts.append(conflict)
        if conflict.entity == "deck":
            self.decks_skipped += 1
        else:
            self.cards_skipped += 1

    @property
    def rows_inserted(self) -> int:
        return self.decks_inserted + self.cards_inserted
