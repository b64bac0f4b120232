"""
SAT based enumeration of the solutions of a board, used to cross-check the
backtracking search. Every connection gets two variables (single bridge,
double bridge); the connectivity of each model is checked on the board.
"""
import logging
import time
from contextlib import closing
from itertools import product
from typing import Dict, Iterator, List, Optional, Tuple

from pysat.solvers import Glucose3

from hashi.board import Board, Connection
from hashi.solver import is_connected

logger = logging.getLogger(__name__)


def exactly_n_bridges(bridge_vars: List[Tuple[int, int]], n: int) -> List[List[int]]:
    """Forbid every (0/1/2 per connection) assignment whose total is not n."""
    clauses = []
    for assignment in product([0, 1, 2], repeat=len(bridge_vars)):
        if sum(assignment) == n:
            continue
        clause = []
        for (s_var, d_var), state in zip(bridge_vars, assignment):
            if state == 0:
                clause.extend((s_var, d_var))
            elif state == 1:
                clause.extend((-s_var, d_var))
            else:
                clause.extend((s_var, -d_var))
        clauses.append(clause)
    return clauses


def build_clauses(board: Board) -> Tuple[Dict[int, Tuple[int, int]], List[List[int]]]:
    """Returns the variables of each connection index and the CNF of the board."""
    var_map = {conn.index: (2 * conn.index + 1, 2 * conn.index + 2) for conn in board.connections}
    clauses = [[-s_var, -d_var] for s_var, d_var in var_map.values()]

    for island in board.islands:
        bridge_vars = [var_map[conn.index] for conn in island.connections if not conn.is_outside]
        clauses.extend(exactly_n_bridges(bridge_vars, island.expected))

    # Each crossing pair is registered on both connections, emit it once
    for conn in board.connections:
        if not conn.vertical:
            continue
        for other in conn.crossings:
            for v in var_map[conn.index]:
                for w in var_map[other]:
                    clauses.append([-v, -w])

    return var_map, clauses


def _counts_from_model(board: Board, var_map, model) -> Tuple[int, ...]:
    true_vars = {lit for lit in model if lit > 0}

    def count(conn: Connection) -> int:
        s_var, d_var = var_map[conn.index]
        if d_var in true_vars:
            return 2
        return 1 if s_var in true_vars else 0

    return tuple(count(conn) for conn in board.connections)


def iter_sat_solutions(board: Board) -> Iterator[Tuple[int, ...]]:
    """Yields the bridge counts of every connected solution of the board."""
    if not board.islands:
        return
    board.reserve_visited()
    if any(all(conn.is_outside for conn in island.connections) for island in board.islands):
        return

    var_map, clauses = build_clauses(board)
    with Glucose3(bootstrap_with=clauses) as sat:
        while sat.solve():
            model = sat.get_model()
            sat.add_clause([-lit for lit in model])
            counts = _counts_from_model(board, var_map, model)
            board.apply(counts)
            try:
                connected = is_connected(board)
            finally:
                board.reset()
            if connected:
                yield counts


def solve_with_pysat(board: Board, limit: Optional[int] = None) -> List[Tuple[int, ...]]:
    if limit is not None and limit < 1:
        return []
    start = time.perf_counter()
    found = []
    with closing(iter_sat_solutions(board)) as solutions:
        for counts in solutions:
            found.append(counts)
            if limit is not None and len(found) >= limit:
                break
    logger.info("PySAT: %d solutions in %.3fs", len(found), time.perf_counter() - start)
    return found
