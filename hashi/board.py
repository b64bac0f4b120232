import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Direction(IntEnum):
    UP = 0
    LEFT = 1
    RIGHT = 2
    DOWN = 3


OPPOSITE = {
    Direction.UP: Direction.DOWN,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.DOWN: Direction.UP,
}

# Maximum of bridges between two connected islands
MAX_CONNECTION_BRIDGES = 2

# Maximum of expected bridges that an island can specify
MAX_EXPECTED_BRIDGES = MAX_CONNECTION_BRIDGES * len(Direction)


###############################################################################
# ERRORS & LIMITS
###############################################################################

class HashiError(Exception):
    """Base class for every error detected while building a board."""


class MalformedInput(HashiError):
    """A value in the puzzle is out of range (e.g. an island asking for 9)."""


class InvalidPlacement(HashiError):
    """Negative, duplicated or out of row-major order island position."""


class CapacityExceeded(HashiError):
    """One of the fixed capacities of the board has been reached."""


@dataclass(frozen=True)
class Limits:
    """
    Capacities checked while building a board and before searching.
    The search also needs about two Python frames per island, so boards
    with more islands than the recursion limit allows are rejected too.
    """
    max_islands: int = 150
    max_connections: int = 300
    max_crossings: int = 300
    max_visited: int = 10000
    max_position: int = 127


###############################################################################
# ISLANDS & CONNECTIONS
###############################################################################

class Island:
    """
    Numbered node of the board.
    neighbors: index of the nearest island in each direction, None if outside.
    connections: Connection shared with each neighbor (OUTSIDE if none).
    """

    def __init__(self, index: int, row: int, col: int, expected: int):
        self.index = index
        self.row = row
        self.col = col
        self.expected = expected
        self.pending = expected
        self.neighbors: List[Optional[int]] = [None] * len(Direction)
        self.connections: List["Connection"] = [OUTSIDE] * len(Direction)

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col

    def degree(self) -> int:
        return sum(conn.bridges for conn in self.connections)

    def __repr__(self):
        return f"Island({self.row}, {self.col}, expected={self.expected}, pending={self.pending})"


class Connection:
    """
    Potential bridge between two islands that see each other in a straight line.
    first/second are island indices (first is the left or upper island).
    crossings holds the indices of the connections crossing this one.
    """

    def __init__(self, index: Optional[int], first: Optional[int], second: Optional[int],
                 vertical: bool = False):
        self.index = index
        self.first = first
        self.second = second
        self.vertical = vertical
        self.bridges = 0
        self.crossings: List[int] = []

    @property
    def is_outside(self) -> bool:
        return self.index is None

    def __repr__(self):
        if self.is_outside:
            return "Connection(OUTSIDE)"
        kind = "V" if self.vertical else "H"
        return f"Connection({self.first}-{self.second} {kind}, bridges={self.bridges})"


# Placeholder shared by every island lacking a neighbor in some direction.
# Both of its endpoints read as 0 pending bridges, so it never gets a bridge.
OUTSIDE = Connection(None, None, None)


###############################################################################
# BOARD
###############################################################################

class Board:
    """
    Hashiwokakero board built island by island in row-major order.
    Handles the topology (neighbors, connections, crossings) and the only two
    state mutators: add_bridge / remove_bridge.
    """

    def __init__(self, limits: Optional[Limits] = None):
        self.limits = limits or Limits()
        self.islands: List[Island] = []
        self.connections: List[Connection] = []
        self.num_crossings = 0
        self.rows = 0
        self.cols = 0
        self.total_expected = 0
        self.visited: Optional[np.ndarray] = None

    @classmethod
    def from_islands(cls, islands: Iterable[Tuple[int, int, int]],
                     limits: Optional[Limits] = None) -> "Board":
        """Build a board from (row, col, expected) tuples given in row-major order."""
        board = cls(limits)
        for row, col, expected in islands:
            board.add_island(row, col, expected)
        logger.debug("Built %dx%d board: %d islands, %d connections, %d crossing entries",
                     board.rows, board.cols, len(board.islands),
                     len(board.connections), board.num_crossings)
        return board

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------
    def add_island(self, row: int, col: int, expected: int) -> Island:
        """Adds a new island that must come after the previous one in row-major order."""
        if row < 0 or col < 0:
            raise InvalidPlacement(f"Negative position: {row},{col}")
        if row >= self.limits.max_position:
            raise CapacityExceeded(f"Maximum of rows reached: {row}")
        if col >= self.limits.max_position:
            raise CapacityExceeded(f"Maximum of columns reached: {col}")
        if self.islands:
            prev = self.islands[-1]
            if row < prev.row or (row == prev.row and col <= prev.col):
                raise InvalidPlacement(f"Invalid position: {row},{col}")
        if expected < 1 or expected > MAX_EXPECTED_BRIDGES:
            raise MalformedInput(f"Bad number of bridges: {expected}")
        if len(self.islands) >= self.limits.max_islands:
            raise CapacityExceeded(f"Maximum of islands reached: {len(self.islands)}")

        island = Island(len(self.islands), row, col, expected)
        self.islands.append(island)
        self.rows = max(self.rows, row + 1)
        self.cols = max(self.cols, col + 1)
        self._fill_connections(island)
        self.total_expected += expected
        return island

    def _find_left(self, island: Island) -> Optional[Island]:
        # Scan order makes the previous island the only candidate
        if island.index > 0:
            prev = self.islands[island.index - 1]
            if prev.row == island.row:
                return prev
        return None

    def _find_up(self, island: Island) -> Optional[Island]:
        for index in range(island.index - 1, -1, -1):
            other = self.islands[index]
            if other.col == island.col:
                return other
        return None

    def _new_connection(self, first: Island, second: Island, vertical: bool) -> Connection:
        if len(self.connections) >= self.limits.max_connections:
            raise CapacityExceeded(f"Maximum of connections reached: {len(self.connections)}")
        conn = Connection(len(self.connections), first.index, second.index, vertical)
        self.connections.append(conn)
        return conn

    def _link(self, island: Island, neighbor: Island, direction: Direction, conn: Connection):
        island.neighbors[direction] = neighbor.index
        island.connections[direction] = conn
        neighbor.neighbors[OPPOSITE[direction]] = island.index
        neighbor.connections[OPPOSITE[direction]] = conn

    def _fill_connections(self, island: Island):
        """Creates the connections of the last added island (only left and up exist yet)."""
        left = self._find_left(island)
        if left is not None:
            conn = self._new_connection(left, island, vertical=False)
            self._link(island, left, Direction.LEFT, conn)

        up = self._find_up(island)
        if up is not None:
            conn = self._new_connection(up, island, vertical=True)
            self._link(island, up, Direction.UP, conn)
            self._fill_crossings(up, island)

    def _fill_crossings(self, up: Island, down: Island):
        """Registers the horizontal connections crossed by the vertical one up-down."""
        col = up.col
        vertical = up.connections[Direction.DOWN]
        for island in self.islands[up.index + 1:down.index]:
            if not (up.row < island.row < down.row and island.col < col):
                continue
            right = island.neighbors[Direction.RIGHT]
            if right is not None and self.islands[right].col > col:
                self._add_crossing(vertical, island.connections[Direction.RIGHT])

    def _add_crossing(self, vertical: Connection, horizontal: Connection):
        if self.num_crossings + 2 > self.limits.max_crossings:
            raise CapacityExceeded(f"Maximum of cross elements reached: {self.num_crossings}")
        vertical.crossings.append(horizontal.index)
        horizontal.crossings.append(vertical.index)
        self.num_crossings += 2

    def reserve_visited(self) -> np.ndarray:
        """Allocates the bitmap used by the connectivity check."""
        size = self.rows * self.cols
        if size > self.limits.max_visited:
            raise CapacityExceeded(f"Maximum visited islands size too small: {self.limits.max_visited}")
        if self.visited is None or self.visited.size != size:
            self.visited = np.zeros(size, dtype=bool)
        return self.visited

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_left_of(self, row: int, col: int) -> Optional[Island]:
        """Nearest island in the given row strictly left of col."""
        for island in reversed(self.islands):
            if island.row == row:
                if island.col < col:
                    return island
            elif island.row < row:
                break
        return None

    def find_up_of(self, row: int, col: int) -> Optional[Island]:
        """Nearest island in the given column strictly above row."""
        for island in reversed(self.islands):
            if island.col == col and island.row < row:
                return island
        return None

    def endpoints(self, conn: Connection) -> Tuple[Island, Island]:
        return self.islands[conn.first], self.islands[conn.second]

    # ------------------------------------------------------------------
    # Bridge state
    # ------------------------------------------------------------------
    def _pending(self, index: Optional[int]) -> int:
        return 0 if index is None else self.islands[index].pending

    def add_bridge(self, conn: Connection) -> bool:
        """Adds a bridge to the connection or returns False if it cannot be done."""
        if conn.bridges >= MAX_CONNECTION_BRIDGES:
            return False
        if not (self._pending(conn.first) and self._pending(conn.second)):
            return False
        for index in conn.crossings:
            if self.connections[index].bridges:
                return False
        conn.bridges += 1
        self.islands[conn.first].pending -= 1
        self.islands[conn.second].pending -= 1
        return True

    def remove_bridge(self, conn: Connection) -> bool:
        """Deletes a bridge from the connection or returns False if it has none."""
        if not conn.bridges:
            return False
        conn.bridges -= 1
        self.islands[conn.first].pending += 1
        self.islands[conn.second].pending += 1
        return True

    def clear(self, conn: Connection):
        while self.remove_bridge(conn):
            pass

    def reset(self):
        for conn in self.connections:
            self.clear(conn)

    # ------------------------------------------------------------------
    # Solution interchange
    # ------------------------------------------------------------------
    def bridge_counts(self) -> Tuple[int, ...]:
        return tuple(conn.bridges for conn in self.connections)

    def apply(self, counts: Sequence[int]):
        """Loads an assignment (bridges per connection index) from a clean board."""
        if len(counts) != len(self.connections):
            raise ValueError(f"Expected {len(self.connections)} counts, got {len(counts)}")
        self.reset()
        for conn, count in zip(self.connections, counts):
            for _ in range(count):
                if not self.add_bridge(conn):
                    self.reset()
                    raise ValueError(f"Cannot place {count} bridges on {conn!r}")

    def as_solution(self) -> Dict[Tuple, int]:
        """Current bridges as {((r1, c1), (r2, c2), count): 1}."""
        solution = {}
        for conn in self.connections:
            if conn.bridges:
                a, b = self.endpoints(conn)
                solution[(a.position, b.position, conn.bridges)] = 1
        return solution
