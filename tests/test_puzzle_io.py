import numpy as np
import pytest

from hashi.board import Board, MalformedInput
from hashi.puzzle_io import (
    format_output,
    islands_from_grid,
    parse_puzzle,
    read_grid_file,
    read_puzzle_file,
    render_board,
)


def test_parse_slashes_and_newlines():
    expected = [(0, 1, 2), (2, 0, 1), (2, 3, 1), (3, 0, 3), (3, 1, 5), (4, 1, 2), (4, 3, 2)]
    assert parse_puzzle("02/000/1001/35/0202") == expected
    assert parse_puzzle(".2\n...\n1..1\n35\n.2.2\n") == expected


def test_parse_ignores_unknown_characters():
    assert parse_puzzle("1 x.\r\n 1") == [(0, 0, 1), (1, 0, 1)]


def test_parse_keeps_nine_for_the_builder():
    islands = parse_puzzle("9")
    assert islands == [(0, 0, 9)]
    with pytest.raises(MalformedInput):
        Board.from_islands(islands)


def test_read_puzzle_file(tmp_path):
    path = tmp_path / "puzzle.txt"
    path.write_text("1.1\n")
    assert read_puzzle_file(str(path)) == [(0, 0, 1), (0, 2, 1)]
    with pytest.raises(FileNotFoundError):
        read_puzzle_file(str(tmp_path / "missing.txt"))


def test_read_grid_file(tmp_path):
    comma = tmp_path / "comma.txt"
    comma.write_text("1, 0, 1\n0, 0, 0\n\n")
    space = tmp_path / "space.txt"
    space.write_text("1 0 1\n0 0 0\n")

    for path in (comma, space):
        grid = read_grid_file(str(path))
        assert grid.shape == (2, 3)
        assert islands_from_grid(grid) == [(0, 0, 1), (0, 2, 1)]


def test_read_grid_file_errors(tmp_path):
    ragged = tmp_path / "ragged.txt"
    ragged.write_text("1 0 1\n0 0\n")
    with pytest.raises(MalformedInput):
        read_grid_file(str(ragged))

    junk = tmp_path / "junk.txt"
    junk.write_text("1 a 1\n")
    with pytest.raises(MalformedInput):
        read_grid_file(str(junk))


def test_islands_from_grid():
    grid = np.array([[2, 0, 3], [0, 0, 0], [1, 0, 4]])
    assert islands_from_grid(grid) == [(0, 0, 2), (0, 2, 3), (2, 0, 1), (2, 2, 4)]
    assert islands_from_grid(np.zeros((0, 0), dtype=int)) == []
    with pytest.raises(MalformedInput):
        islands_from_grid(np.array([[1, -1]]))


def test_render_horizontal(make_board):
    board = make_board("11")
    assert render_board(board) == "(1)  (1)  \n          \n\n"
    board.add_bridge(board.connections[0])
    assert render_board(board) == "(1)--(1)  \n          \n\n"


def test_render_bridge_over_empty_cell(make_board):
    board = make_board("1.1")
    assert render_board(board).splitlines()[0] == "(1)   -   (1)  "
    board.add_bridge(board.connections[0])
    assert render_board(board).splitlines()[0] == "(1)-------(1)  "


def test_render_vertical(make_board):
    board = make_board("2/./2")
    lines = render_board(board).splitlines()
    assert lines[:4] == ["(2)  ", "     ", " '   ", "     "]

    conn = board.connections[0]
    board.add_bridge(conn)
    board.add_bridge(conn)
    lines = render_board(board).splitlines()
    assert lines[:4] == ["(2)  ", " !!  ", " !!  ", " !!  "]


def test_render_junction_and_empty_cells(make_board):
    board = make_board(".1./1.1/.1.")
    lines = render_board(board).splitlines()
    assert lines[0] == " .   (1)   .   "
    assert lines[2] == "(1)   +   (1)  "


def test_render_empty_board():
    assert render_board(Board.from_islands([])) == "\n"


def test_format_output(make_board):
    board = make_board("2.2/.../1.1")
    board.apply((2, 0, 1, 0))
    assert format_output(board) == [
        ['2', '=', '2'],
        ['0', '0', '0'],
        ['1', '-', '1'],
    ]
    board.reset()
    board.apply((1, 1, 0, 1))
    assert format_output(board) == [
        ['2', '-', '2'],
        ['|', '0', '|'],
        ['1', '0', '1'],
    ]


def test_read_files_with_bytes_that_are_not_text(tmp_path):
    puzzle = tmp_path / "puzzle.txt"
    puzzle.write_bytes(b"1\xe91\n")
    assert read_puzzle_file(str(puzzle)) == [(0, 0, 1), (0, 1, 1)]

    grid = tmp_path / "grid.txt"
    grid.write_bytes(b"1 \xe9 1\n")
    with pytest.raises(MalformedInput):
        read_grid_file(str(grid))
