import os
from typing import List, Tuple

import numpy as np

from hashi.board import OUTSIDE, Board, Connection, Direction, MalformedInput

IslandSpec = Tuple[int, int, int]


###############################################################################
# INPUT
###############################################################################

def parse_puzzle(text: str) -> List[IslandSpec]:
    """
    Reads the islands of a puzzle written as digits and dots.
    '.' or '0' is an empty cell, '1'-'9' an island, '/' or a newline starts a
    new row. Any other character is ignored.
    Example: "02/000/1001/35/0202"
    """
    islands = []
    row = col = 0
    for ch in text:
        if ch in "/\n":
            row += 1
            col = 0
        elif ch in ".0":
            col += 1
        elif "1" <= ch <= "9":
            islands.append((row, col, int(ch)))
            col += 1
    return islands


def read_puzzle_file(path: str) -> List[IslandSpec]:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found: {path}")
    # Bytes that are not text are skipped like any unknown character
    with open(path, "r", errors="ignore") as f:
        return parse_puzzle(f.read())


def read_grid_file(path: str) -> np.ndarray:
    """Read a grid file (comma or space separated numbers, one row per line)."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found: {path}")

    with open(path, "r", errors="replace") as f:
        lines = f.readlines()

    grid_data = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            if "," in line:
                row = [int(x.strip()) for x in line.split(",")]
            else:
                row = [int(x) for x in line.split()]
        except ValueError:
            raise MalformedInput(f"Invalid grid row: {line!r}")
        grid_data.append(row)

    if not grid_data:
        return np.zeros((0, 0), dtype=int)
    if len({len(row) for row in grid_data}) != 1:
        raise MalformedInput("Grid rows have different lengths")
    return np.array(grid_data, dtype=int)


def islands_from_grid(grid: np.ndarray) -> List[IslandSpec]:
    """Find all islands (positive cells) in row-major order."""
    grid = np.asarray(grid)
    if grid.size == 0:
        return []
    if grid.ndim != 2:
        raise MalformedInput(f"Grid must be 2D, got shape {grid.shape}")
    if (grid < 0).any():
        i, j = np.argwhere(grid < 0)[0]
        raise MalformedInput(f"Negative cell value at {i},{j}: {grid[i, j]}")
    return [(int(i), int(j), int(grid[i, j])) for i, j in np.argwhere(grid > 0)]


###############################################################################
# OUTPUT
###############################################################################

def _horizontal(board: Board, row: int, col: int) -> Connection:
    left = board.find_left_of(row, col)
    return OUTSIDE if left is None else left.connections[Direction.RIGHT]


def _vertical(board: Board, row: int, col: int) -> Connection:
    up = board.find_up_of(row, col)
    return OUTSIDE if up is None else up.connections[Direction.DOWN]


def _empty_position(board: Board, row: int, col: int) -> str:
    horizontal = _horizontal(board, row, col)
    vertical = _vertical(board, row, col)
    if horizontal.bridges:
        return "---" if horizontal.bridges == 1 else "==="
    if vertical.bridges:
        return " ! " if vertical.bridges == 1 else " !!"
    empty_left = not horizontal.is_outside
    empty_up = not vertical.is_outside
    if empty_left and empty_up:
        return " + "
    if empty_left:
        return " - "
    if empty_up:
        return " ' "
    return " . "


def _space_right(board: Board, row: int, col: int) -> str:
    bridges = _horizontal(board, row, col).bridges
    return {1: "--", 2: "=="}.get(bridges, "  ")


def _space_down(board: Board, row: int, col: int) -> str:
    bridges = _vertical(board, row, col).bridges
    return {1: " ! ", 2: " !!"}.get(bridges, "   ")


def render_board(board: Board) -> str:
    """
    ASCII drawing of the board and its current bridges.
    Islands are "(n)", single/double bridges are "-"/"=" horizontally and
    "!"/"!!" vertically. Empty cells show which empty connections pass by:
    "+" both, "-" horizontal, "'" vertical, "." none.
    """
    lines = []
    index = 0
    for i in range(board.rows):
        cells = []
        for j in range(board.cols):
            island = board.islands[index] if index < len(board.islands) else None
            if island is not None and island.position == (i, j):
                cells.append(f"({island.expected})")
                index += 1
            else:
                cells.append(_empty_position(board, i, j))
            cells.append(_space_right(board, i, j + 1))
        lines.append("".join(cells))
        lines.append("".join(_space_down(board, i + 1, j) + "  " for j in range(board.cols)))
    return "".join(line + "\n" for line in lines) + "\n"


def format_output(board: Board) -> List[List[str]]:
    """
    Format the current bridges as a grid of symbols:
    '0' empty, island number, '-'/'=' horizontal, '|'/'$' vertical.
    """
    output = [['0' for _ in range(board.cols)] for _ in range(board.rows)]

    for island in board.islands:
        output[island.row][island.col] = str(island.expected)

    for conn in board.connections:
        if not conn.bridges:
            continue
        a, b = board.endpoints(conn)
        if conn.vertical:
            symbol = "$" if conn.bridges == 2 else "|"
            for r in range(a.row + 1, b.row):
                output[r][a.col] = symbol
        else:
            symbol = "=" if conn.bridges == 2 else "-"
            for c in range(a.col + 1, b.col):
                output[a.row][c] = symbol

    return output
