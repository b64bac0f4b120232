import pytest

from hashi.sat import build_clauses, exactly_n_bridges, iter_sat_solutions, solve_with_pysat
from hashi.solver import solve


def test_exactly_n_bridges_single_connection():
    # forbids 0 bridges and 2 bridges
    assert exactly_n_bridges([(1, 2)], 1) == [[1, 2], [1, -2]]
    assert exactly_n_bridges([], 0) == []


def test_exactly_n_bridges_counts():
    clauses = exactly_n_bridges([(1, 2), (3, 4)], 2)
    # 9 assignments, 3 of them sum to 2
    assert len(clauses) == 6


def test_build_clauses_crossing(make_board):
    board = make_board(".1./1.1/.1.")
    var_map, clauses = build_clauses(board)
    assert var_map == {0: (1, 2), 1: (3, 4)}
    for v in (1, 2):
        for w in (3, 4):
            assert [-v, -w] in clauses or [-w, -v] in clauses


@pytest.mark.parametrize("text", [
    "11",
    "22/22",
    "33/33",
    "2.3/.../2.3",
    "222/222",
    ".1./1.1/.1.",
    "11/../11",
    "1.3.1/...../2.5.2",
    "222/3.3/222",
])
def test_sat_matches_backtracking(make_board, text):
    board = make_board(text)
    assert set(iter_sat_solutions(board)) == set(solve(board))
    assert all(conn.bridges == 0 for conn in board.connections)


def test_island_without_connections(make_board):
    assert solve_with_pysat(make_board("1")) == []
    assert solve_with_pysat(make_board("2.2/.1./2.2")) == []


def test_limit(make_board):
    board = make_board("33/33")
    assert len(solve_with_pysat(board, limit=1)) == 1
    assert board.bridge_counts() == (0, 0, 0, 0)


def test_zero_limit_returns_nothing(make_board):
    board = make_board("33/33")
    assert solve_with_pysat(board, limit=0) == []
    assert board.bridge_counts() == (0, 0, 0, 0)
