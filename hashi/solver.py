import logging
import sys
import time
from contextlib import closing
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from hashi.board import Board, CapacityExceeded, Direction, Island

logger = logging.getLogger(__name__)

# Only the islands not visited yet can get new bridges from the current one
FORWARD = (Direction.RIGHT, Direction.DOWN)

# Frames used by the caller, forward_splits and is_connected on top of the search
STACK_MARGIN = 50


@dataclass
class SearchStats:
    nodes: int = 0
    assignments: int = 0
    solutions: int = 0


###############################################################################
# PER-ISLAND MOVES
###############################################################################

def clear_forward(board: Board, island: Island):
    for direction in FORWARD:
        board.clear(island.connections[direction])


def fill_bridges(board: Board, island: Island) -> bool:
    """
    Greedily fills the pending bridges of the island using only the RIGHT and
    DOWN connections (LEFT and UP were fixed by earlier islands).
    If the island cannot be completed every added bridge is deleted.
    """
    directions = iter(FORWARD)
    direction = next(directions)
    while island.pending:
        if not board.add_bridge(island.connections[direction]):
            direction = next(directions, None)
            if direction is None:
                break
    if island.pending:
        clear_forward(board, island)
        return False
    return True


def reorder_bridges(board: Board, island: Island) -> bool:
    """
    Moves one bridge of a completed island from RIGHT to DOWN.
    Returns False when no other ordering exists, leaving both connections empty.
    """
    if board.remove_bridge(island.connections[Direction.RIGHT]):
        if board.add_bridge(island.connections[Direction.DOWN]):
            return True
        board.clear(island.connections[Direction.RIGHT])
    board.clear(island.connections[Direction.DOWN])
    return False


def forward_splits(board: Board, island: Island) -> Iterator[None]:
    """
    Yields once for every split of the island's pending bridges between its
    forward connections. The forward connections are empty again on exit,
    also when the consumer stops iterating early.
    """
    if not fill_bridges(board, island):
        return
    try:
        yield
        while reorder_bridges(board, island):
            yield
    finally:
        clear_forward(board, island)


###############################################################################
# CONNECTIVITY
###############################################################################

def is_connected(board: Board) -> bool:
    """True if every island is reachable from the first one through bridges."""
    if not board.islands:
        return True
    visited = board.visited if board.visited is not None else board.reserve_visited()
    total = 0
    limit = 0
    stack = [board.islands[0]]
    while stack:
        island = stack.pop()
        pos = island.row * board.cols + island.col
        if visited[pos]:
            continue
        visited[pos] = True
        total += 1
        limit = max(limit, pos + 1)
        for direction in Direction:
            if island.connections[direction].bridges:
                stack.append(board.islands[island.neighbors[direction]])
    # Only the touched prefix needs resetting
    visited[:limit] = False
    return total == len(board.islands)


###############################################################################
# SEARCH
###############################################################################

def _search(board: Board, idx: int, stats: SearchStats) -> Iterator[Board]:
    if idx == len(board.islands):
        stats.assignments += 1
        if is_connected(board):
            stats.solutions += 1
            yield board
        return
    with closing(forward_splits(board, board.islands[idx])) as splits:
        for _ in splits:
            stats.nodes += 1
            yield from _search(board, idx + 1, stats)


def check_search_depth(board: Board):
    """Raises CapacityExceeded if the search would hit the recursion limit."""
    needed = 2 * len(board.islands) + STACK_MARGIN
    if needed > sys.getrecursionlimit():
        raise CapacityExceeded(f"Too many islands for the search depth: {len(board.islands)}")


def iter_solutions(board: Board, stats: Optional[SearchStats] = None) -> Iterator[Board]:
    """
    Yields the board once per connected solution, with the solution's bridges
    in place. Copy what you need (bridge_counts / as_solution) before advancing.
    """
    if not board.islands:
        return
    check_search_depth(board)
    board.reserve_visited()
    if stats is None:
        stats = SearchStats()
    yield from _search(board, 0, stats)


def solve(board: Board, limit: Optional[int] = None,
          stats: Optional[SearchStats] = None) -> List[Tuple[int, ...]]:
    """Collects up to `limit` solutions as bridge counts per connection."""
    if stats is None:
        stats = SearchStats()
    if limit is not None and limit < 1:
        return []
    start = time.perf_counter()
    found = []
    solutions = iter_solutions(board, stats)
    try:
        for solved in solutions:
            found.append(solved.bridge_counts())
            if limit is not None and len(found) >= limit:
                break
    finally:
        solutions.close()
    elapsed = time.perf_counter() - start
    logger.info("Backtracking: %d solutions in %.3fs (%d nodes, %d complete assignments)",
                len(found), elapsed, stats.nodes, stats.assignments)
    return found


def count_solutions(board: Board) -> int:
    return len(solve(board))
