import matplotlib

matplotlib.use("Agg")

import pytest

from hashi.board import Board, Limits
from hashi.puzzle_io import parse_puzzle


@pytest.fixture
def make_board():
    def _make(text: str, **limits) -> Board:
        return Board.from_islands(parse_puzzle(text), Limits(**limits))
    return _make
