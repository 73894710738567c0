from cahimport.services.card_ids import CARD_ID_NAMESPACE, CardColor, derive_card_id
from cahimport.services.transformer import (
    ExpansionResult,
    TransformResult,
    deck_from_spec,
    expand,
    transform_pack,
)

__all__ = [
    "CARD_ID_NAMESPACE",
    "CardColor",
    "ExpansionResult",
    "TransformResult",
    "deck_from_spec",
    "derive_card_id",
    "expand",
    "transform_pack",
]
