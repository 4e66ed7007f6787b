"""Unit test configuration - in-memory store and sample corpus"""

import sys
from pathlib import Path

import pytest

# Add tests/unit to path for fakes import
sys.path.insert(0, str(Path(__file__).parent))

from fakes import FakeMythStore, make_myth


@pytest.fixture
def flood_corpus():
    """
    Three myths:
    - 1: The Great Flood (theme: flood)
    - 2: Noah's Ark (theme: flood, overlapping vocabulary)
    - 3: The Sun Chariot (theme: sun, unrelated vocabulary)
    """
    return [
        make_myth(
            1,
            title="The Great Flood",
            summary="A great flood covers the earth. One family builds a vessel and survives the rising waters.",
            content="The waters cover every mountain until the rain stops and the family walks out onto dry land.",
            themes=["Flood"],
            tradition="Mesopotamian",
        ),
        make_myth(
            2,
            title="Noah's Ark",
            summary="A flood covers the earth. A righteous family builds an ark and survives the waters.",
            content="Rain falls for forty days; the waters cover the mountains until the family walks onto dry land.",
            themes=["flood"],
            tags=["ark", "covenant"],
            tradition="Hebrew",
        ),
        make_myth(
            3,
            title="The Sun Chariot",
            summary="A radiant charioteer drives burning horses across the sky each morning.",
            content="At dusk the horses descend beyond the western ocean.",
            themes=["sun"],
            tradition="Greek",
        ),
    ]


@pytest.fixture
def flood_store(flood_corpus):
    return FakeMythStore(flood_corpus)
