from hashi.board import (
    Board,
    CapacityExceeded,
    Connection,
    Direction,
    HashiError,
    Island,
    Limits,
    InvalidPlacement,
    MalformedInput,
)
from hashi.puzzle_io import parse_puzzle, render_board
from hashi.solver import SearchStats, count_solutions, iter_solutions, solve

__all__ = [
    "Board",
    "CapacityExceeded",
    "Connection",
    "Direction",
    "HashiError",
    "Island",
    "Limits",
    "InvalidPlacement",
    "MalformedInput",
    "SearchStats",
    "count_solutions",
    "iter_solutions",
    "parse_puzzle",
    "render_board",
    "solve",
]
