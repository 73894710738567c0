"""
Content-addressed card identifiers.

A card's identity is a version 5 UUID of its deck name, color, position in
that deck's index list and the first characters of its text. Re-running an
import on the same document therefore yields the same identifiers, and a
second load turns into primary-key conflicts instead of duplicates.
"""

import uuid
from enum import Enum

# Shared by every run and installation; changing it re-keys every card.
CARD_ID_NAMESPACE = uuid.UUID("8a903250-8b77-43b2-802d-6f1e261704fd")

TEXT_PREFIX_LENGTH = 7
NAME_DELIMITER = "_"


class CardColor(str, Enum):
    """Card color tag used in identifiers."""

    WHITE = "white"
    BLACK = "black"


def card_id_name(deck_name: str, color: CardColor | str, position: int, text: str) -> str:
    """Build the name string hashed into a card identifier."""
    tag = color.value if isinstance(color, CardColor) else color
    return NAME_DELIMITER.join(
        (deck_name, tag, str(position), text[:TEXT_PREFIX_LENGTH])
    )


def derive_card_id(
    deck_name: str,
    color: CardColor | str,
    position: int,
    text: str,
    namespace: uuid.UUID = CARD_ID_NAMESPACE,
) -> str:
    """
    Derive the stable identifier of a card.

    Args:
        deck_name: Name of the owning deck
        color: "white" or "black"
        position: Index of the entry within the deck's own index list,
            not its position in the shared pool
        text: Card text; only the first 7 characters are used
        namespace: UUID namespace for the name-based hash

    Returns:
        UUID string, identical for identical arguments across processes.

    Two logically distinct cards can collide when they share deck, color,
    position and text prefix. The second insert then hits the primary key
    and is skipped like any other conflict.
    """
    return str(uuid.uuid5(namespace, card_id_name(deck_name, color, position, text)))
