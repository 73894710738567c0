"""
Input document model.

Mirrors the compact JSON layout: two shared card pools plus a deck map whose
entries reference the pools by index. Only structure is validated here;
index bounds and pick ranges are checked by the transformer.
"""

from pydantic import BaseModel, ConfigDict, Field


class BlackCardData(BaseModel):
    """A prompt card in the black pool."""

    text: str
    pick: int


class DeckSpec(BaseModel):
    """
    A deck entry from the metadata map.

    Attributes:
        id: Deck identifier, authoritative over the metadata key
        name: Display name, also part of every card identifier
        official: Whether the deck is an official release
        white_indices: Positions in the white pool
        black_indices: Positions in the black pool
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    official: bool
    white_indices: list[int] = Field(default_factory=list, alias="white")
    black_indices: list[int] = Field(default_factory=list, alias="black")


class ContentPack(BaseModel):
    """The whole input document."""

    model_config = ConfigDict(populate_by_name=True)

    white_pool: list[str] = Field(alias="white")
    black_pool: list[BlackCardData] = Field(alias="black")
    deck_metadata: dict[str, DeckSpec] = Field(alias="metadata")
