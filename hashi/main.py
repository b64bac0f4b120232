import argparse
import logging
import sys
import time
from contextlib import closing
from typing import Iterator, List, Optional

from hashi.board import Board, HashiError, Limits
from hashi.puzzle_io import (
    IslandSpec,
    format_output,
    islands_from_grid,
    parse_puzzle,
    read_grid_file,
    read_puzzle_file,
    render_board,
)
from hashi.sat import iter_sat_solutions
from hashi.solver import SearchStats, check_search_depth, iter_solutions

logger = logging.getLogger(__name__)


def read_stdin() -> str:
    # Bytes that are not text are skipped like any unknown character
    stream = getattr(sys.stdin, "buffer", None)
    if stream is None:
        return sys.stdin.read()
    return stream.read().decode("ascii", "ignore")


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def load_islands(path: Optional[str], input_format: str) -> List[IslandSpec]:
    if input_format == "grid":
        if path is None:
            raise FileNotFoundError("The grid format needs an input file")
        return islands_from_grid(read_grid_file(path))
    if path is None:
        return parse_puzzle(read_stdin())
    return read_puzzle_file(path)


def show(board: Board, output_format: str):
    if output_format == "grid":
        for row in format_output(board):
            print(row)
        print()
    else:
        print(render_board(board), end="")


def solutions_of(board: Board, method: str, stats: SearchStats) -> Iterator[Board]:
    """Yields the board with each solution in place, whatever the method."""
    if method == "sat":
        with closing(iter_sat_solutions(board)) as solutions:
            for counts in solutions:
                stats.solutions += 1
                board.apply(counts)
                try:
                    yield board
                finally:
                    board.reset()
    else:
        yield from iter_solutions(board, stats)


def build_parser() -> argparse.ArgumentParser:
    defaults = Limits()
    parser = argparse.ArgumentParser(
        prog="hashi",
        description="Print every solution of a Hashiwokakero puzzle. "
                    "Input: digits and dots, rows separated by newlines or '/' "
                    "(e.g. 02/000/1001/35/0202).")
    parser.add_argument("puzzle", nargs="?", help="puzzle file (default: standard input)")
    parser.add_argument("--input-format", choices=("hashi", "grid"), default="hashi",
                        help="'grid' reads comma or space separated numbers")
    parser.add_argument("--method", choices=("backtracking", "sat"), default="backtracking")
    parser.add_argument("--format", dest="output_format", choices=("ascii", "grid"), default="ascii")
    parser.add_argument("--limit", type=positive_int, default=None, help="stop after N solutions")
    parser.add_argument("--max-islands", type=int, default=defaults.max_islands)
    parser.add_argument("--max-connections", type=int, default=defaults.max_connections)
    parser.add_argument("--max-crossings", type=int, default=defaults.max_crossings)
    parser.add_argument("--max-visited", type=int, default=defaults.max_visited)
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    limits = Limits(max_islands=args.max_islands, max_connections=args.max_connections,
                    max_crossings=args.max_crossings, max_visited=args.max_visited)
    try:
        board = Board.from_islands(load_islands(args.puzzle, args.input_format), limits)
        if board.islands:
            check_search_depth(board)
            board.reserve_visited()
    except (HashiError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    show(board, args.output_format)

    stats = SearchStats()
    start = time.perf_counter()
    found = 0
    with closing(solutions_of(board, args.method, stats)) as solutions:
        for solved in solutions:
            show(solved, args.output_format)
            found += 1
            if args.limit is not None and found >= args.limit:
                break
    logger.info("%s: %d solutions in %.3fs (%d nodes visited)",
                args.method, found, time.perf_counter() - start, stats.nodes)
    return 0


if __name__ == "__main__":
    sys.exit(main())
