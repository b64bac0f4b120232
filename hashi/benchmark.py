import argparse
import glob
import os
import time
import tracemalloc
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from hashi.board import Board, HashiError
from hashi.puzzle_io import read_puzzle_file
from hashi.sat import solve_with_pysat
from hashi.solver import check_search_depth, solve

# Format: (Display Name, Function Object, POTENTIAL BRIDGE (CONNECTION) LIMIT)
# The backtracking enumerates every split, so it is the one to keep in check.
ALGORITHMS = [
    ("Backtracking", solve, 60),
    ("PySAT", solve_with_pysat, 9999999999),
]


def run_benchmark(input_dir: str = "Inputs", plot_path: Optional[str] = None,
                  show_plot: bool = True) -> Dict[str, Dict[str, list]]:
    input_files = sorted(glob.glob(os.path.join(input_dir, "*.txt")))

    if not input_files:
        print(f"No input files found in '{input_dir}'!")
        return {}

    results = {name: {'times': [], 'mems': [], 'counts': [], 'files': []} for name, _, _ in ALGORITHMS}
    file_labels = []

    header = (f"{'File':<15} | {'Islands':<7} | {'Conns(M)':<8} | {'Algorithm':<15} | "
              f"{'Time (s)':<10} | {'Mem (KB)':<10} | {'Solutions'}")
    print(header)
    print("-" * len(header))

    for file_path in input_files:
        filename = os.path.basename(file_path)

        try:
            board = Board.from_islands(read_puzzle_file(file_path))
            check_search_depth(board)
            board.reserve_visited()
        except HashiError as e:
            print(f"Error preparing {filename}: {e}")
            continue

        num_islands = len(board.islands)
        num_conns = len(board.connections)
        file_labels.append(f"{filename.replace('.txt', '')}\n(M={num_conns})")

        for algo_name, func_object, conn_limit in ALGORITHMS:
            data = results[algo_name]
            data['files'].append(filename)

            if num_conns > conn_limit:
                data['times'].append(None)
                data['mems'].append(None)
                data['counts'].append(None)
                print(f"{filename:<15} | {num_islands:<7} | {num_conns:<8} | {algo_name:<15} | "
                      f"{'SKIP':<10} | {'SKIP':<10} | > {conn_limit} Connections")
                continue

            tracemalloc.start()
            start_time = time.perf_counter()
            solutions = func_object(board)
            duration = time.perf_counter() - start_time
            _, peak_mem = tracemalloc.get_traced_memory()
            tracemalloc.stop()

            data['times'].append(duration)
            data['mems'].append(peak_mem / 1024)
            data['counts'].append(len(solutions))
            print(f"{filename:<15} | {num_islands:<7} | {num_conns:<8} | {algo_name:<15} | "
                  f"{duration:<10.4f} | {peak_mem / 1024:<10.2f} | {len(solutions)}")

        counts = {results[name]['counts'][-1] for name, _, _ in ALGORITHMS} - {None}
        if len(counts) > 1:
            print(f"WARNING: {filename}: algorithms disagree on the number of solutions {sorted(counts)}")

    if file_labels and (show_plot or plot_path):
        plot_results(results, file_labels, plot_path)
    return results


def plot_results(results: Dict[str, Dict[str, list]], file_labels: List[str],
                 plot_path: Optional[str] = None):
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(14, 10))

    # 1. Time Plot
    for algo_name, data in results.items():
        clean_times = [t if t is not None else np.nan for t in data['times']]
        ax1.plot(file_labels, clean_times, marker='o', label=algo_name, linewidth=2)

    ax1.set_title('Execution Time (Log Scale) vs Complexity (M=Connections)')
    ax1.set_ylabel('Time (s)')
    ax1.set_yscale('log')
    ax1.grid(True, which="both", ls="-", alpha=0.3)
    ax1.legend()

    # 2. Memory Plot
    for algo_name, data in results.items():
        clean_mems = [m if m is not None else np.nan for m in data['mems']]
        ax2.plot(file_labels, clean_mems, marker='s', linestyle='--', label=algo_name)

    ax2.set_title('Peak Memory Usage vs Complexity')
    ax2.set_ylabel('Memory (KB)')
    ax2.set_xlabel('Puzzles (M = Potential Bridges)')
    ax2.grid(True, which="both", ls="-", alpha=0.3)
    ax2.legend()

    plt.tight_layout()
    if plot_path:
        fig.savefig(plot_path, dpi=200)
        print(f"Plot written to: {plot_path}")
        plt.close(fig)
    else:
        print("\nDisplaying plot...")
        plt.show()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compare the backtracking and SAT enumerations")
    parser.add_argument("input_dir", nargs="?", default="Inputs")
    parser.add_argument("--plot", dest="plot_path", default=None, help="save the plot instead of showing it")
    parser.add_argument("--no-plot", action="store_true")
    args = parser.parse_args(argv)
    run_benchmark(args.input_dir, plot_path=args.plot_path, show_plot=not args.no_plot)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
