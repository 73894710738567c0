"""
Pool dereferencing.

Expands each deck's pooled index lists into concrete Card rows. Bad entries
(out-of-range index, unsupported pick) are skipped with a warning so a single
malformed reference never aborts an otherwise valid deck.
"""

import logging
from dataclasses import dataclass, field

from cahimport.models.content import BlackCardData, ContentPack, DeckSpec
from cahimport.models.errors import InvalidIndexWarning, InvalidPickWarning, TransformWarning
from cahimport.models.records import Card, Deck
from cahimport.services.card_ids import CardColor, derive_card_id

logger = logging.getLogger(__name__)

VALID_PICKS = frozenset({1, 2, 3})


@dataclass
class ExpansionResult:
    """Cards produced for one deck plus the entries that were skipped."""

    cards: list[Card] = field(default_factory=list)
    warnings: list[TransformWarning] = field(default_factory=list)


@dataclass
class TransformResult:
    """Decks and cards for a whole content pack."""

    decks: list[Deck] = field(default_factory=list)
    cards: list[Card] = field(default_factory=list)
    warnings: list[TransformWarning] = field(default_factory=list)


def deck_from_spec(key: str, spec: DeckSpec) -> Deck:
    """
    Build the Deck row for a metadata entry.

    The metadata key should equal the deck id; when it doesn't, the id wins.
    """
    if key != str(spec.id):
        logger.warning(
            'Mismatch between metadata key ("%s") and deck.id (%d) for deck "%s". '
            "Using deck.id (%d).",
            key,
            spec.id,
            spec.name,
            spec.id,
        )
    return Deck(id=spec.id, name=spec.name, official=spec.official)


def _skip(result: ExpansionResult, warning: TransformWarning) -> None:
    logger.warning(warning.message)
    result.warnings.append(warning)


def expand(spec: DeckSpec, white_pool: list[str], black_pool: list[BlackCardData]) -> ExpansionResult:
    """
    Dereference one deck's index lists against the shared pools.

    Args:
        spec: Deck entry from the metadata map
        white_pool: Shared white card texts
        black_pool: Shared black cards

    Returns:
        ExpansionResult with white cards first, then black cards, each in the
        order of the deck's index list. Never raises for bad indices.
    """
    result = ExpansionResult()

    for position, index in enumerate(spec.white_indices):
        if not 0 <= index < len(white_pool):
            _skip(
                result,
                InvalidIndexWarning(spec.id, spec.name, CardColor.WHITE.value, index, len(white_pool)),
            )
            continue

        text = white_pool[index]
        result.cards.append(
            Card(
                id=derive_card_id(spec.name, CardColor.WHITE, position, text),
                deck_id=spec.id,
                text=text,
                pick=None,
            )
        )

    for position, index in enumerate(spec.black_indices):
        if not 0 <= index < len(black_pool):
            _skip(
                result,
                InvalidIndexWarning(spec.id, spec.name, CardColor.BLACK.value, index, len(black_pool)),
            )
            continue

        black = black_pool[index]
        if black.pick not in VALID_PICKS:
            _skip(result, InvalidPickWarning(spec.id, spec.name, index, black.pick))
            continue

        result.cards.append(
            Card(
                id=derive_card_id(spec.name, CardColor.BLACK, position, black.text),
                deck_id=spec.id,
                text=black.text,
                pick=black.pick,
            )
        )

    return result


def transform_pack(pack: ContentPack) -> TransformResult:
    """Expand every deck in metadata order into Deck and Card rows."""
    result = TransformResult()

    for key, spec in pack.deck_metadata.items():
        result.decks.append(deck_from_spec(key, spec))
        expansion = expand(spec, pack.white_pool, pack.black_pool)
        result.cards.extend(expansion.cards)
        result.warnings.extend(expansion.warnings)

    logger.info(
        "Prepared %d decks and %d cards (%d entries skipped)",
        len(result.decks),
        len(result.cards),
        len(result.warnings),
    )
    return result
