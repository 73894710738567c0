"""
Reader for the compact content pack JSON format.

Layout:
    {
        "white": ["card text", ...],
        "black": [{"text": "prompt ___.", "pick": 1}, ...],
        "metadata": {
            "<deck id>": {"id": 1, "name": "...", "official": true,
                          "white": [0, 1], "black": [0]}
        }
    }
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from cahimport.models.content import ContentPack
from cahimport.models.errors import MalformedInputError

logger = logging.getLogger(__name__)


def parse_content_pack(raw: str | bytes) -> ContentPack:
    """
    Decode and structurally validate a content pack document.

    Args:
        raw: Whole JSON document

    Returns:
        Parsed ContentPack

    Raises:
        MalformedInputError: If the text is not JSON or does not have the
            expected shape (missing fields, non-array pools, wrong types)
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedInputError(f"Input is not valid JSON: {e}") from e

    try:
        return ContentPack.model_validate(data)
    except ValidationError as e:
        raise MalformedInputError(f"Input does not match the content pack layout: {e}") from e


def read_content_pack(path: Path) -> ContentPack:
    """
    Read a content pack file in full and parse it.

    Raises:
        MalformedInputError: If the file cannot be read or decoded
    """
    logger.info("Reading JSON data from %s...", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedInputError(f"Could not read input file {path}: {e}") from e

    pack = parse_content_pack(raw)
    logger.info(
        "Parsed %d white cards, %d black cards and %d decks",
        len(pack.white_pool),
        len(pack.black_pool),
        len(pack.deck_metadata),
    )
    return pack
