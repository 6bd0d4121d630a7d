"""
Main entry point for vaultgraph.

Scans a directory (or the bundled demo project), runs the force layout to
rest and prints a summary. Rendering is left to whatever embeds the view
models; this entry point runs headless.

Usage:
    python -m vaultgraph_app PATH
    python -m vaultgraph_app --demo --positions
    vaultgraph PATH  (if installed)
"""

import argparse
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path


def setup_exception_hook(log_file: Path):
    """Setup global exception hook to catch unhandled exceptions."""

    def exception_hook(exctype, value, tb):
        # Write to log file
        error_msg = ''.join(traceback.format_exception(exctype, value, tb))
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"UNHANDLED EXCEPTION at {datetime.now()}\n")
            f.write(f"{'='*60}\n")
            f.write(error_msg)
            f.write("\n")

        # Print to console
        print("\n" + "="*60)
        print("UNHANDLED EXCEPTION!")
        print("="*60)
        print(error_msg)
        print(f"\nError log saved to: {log_file}")

        # Call default handler
        sys.__excepthook__(exctype, value, tb)

    sys.excepthook = exception_hook


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vaultgraph",
        description="Build and lay out the file/reference graph of a directory",
    )
    parser.add_argument("path", nargs="?", help="Directory to scan")
    parser.add_argument("--demo", action="store_true",
                        help="Use the bundled sample project instead of a directory")
    parser.add_argument("--ignore-hidden", action="store_true",
                        help="Skip files and folders whose name starts with a dot")
    parser.add_argument("--max-ticks", type=int, default=1000,
                        help="Stop the layout after this many ticks (default: 1000)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for layout jitter")
    parser.add_argument("--focus", default=None,
                        help="Node id to use as the focal node (e.g. /notes/todo.md)")
    parser.add_argument("--positions", action="store_true",
                        help="Print final node positions as JSON")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    return parser


def main(argv=None) -> int:
    """Run a scan and layout from the command line."""
    args = build_parser().parse_args(argv)
    if not args.path and not args.demo:
        build_parser().error("give a directory or --demo")

    setup_exception_hook(Path.cwd() / "crash_log.txt")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Ensure src is in path for development
    src_path = Path(__file__).parent.parent
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))

    from PyQt6.QtCore import QCoreApplication
    from vaultgraph_app.viewmodels import AppCoordinator, GraphVM, LayoutVM

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("vaultgraph")

    graph_vm = GraphVM(ignore_hidden=args.ignore_hidden)
    layout_vm = LayoutVM(seed=args.seed)
    coordinator = AppCoordinator(graph_vm, layout_vm)
    coordinator.status_message.connect(lambda message, _timeout: print(message))

    if args.demo:
        graph_vm.load_demo(background=False)
    else:
        graph_vm.load_directory(args.path, background=False)

    graph = graph_vm.graph
    if graph is None:
        return 1

    for issue in graph_vm.issues:
        print(f"  issue: {issue.path} ({issue.kind.value}: {issue.message})")

    if args.focus:
        graph_vm.select_node(args.focus)

    # Drive the ticks directly instead of waiting on the timer
    ticks = 0
    while ticks < args.max_ticks and layout_vm.step():
        ticks += 1
    phase = layout_vm.phase
    layout_vm.stop()

    stats = graph_vm.stats
    print(
        f"{graph_vm.root_name}: {stats.files:,} files, {stats.folders:,} folders, "
        f"{stats.references:,} references, {stats.total_size_kb:.1f} KB"
    )
    print(f"Layout ran {layout_vm.engine.ticks} ticks ({phase.value})")

    if args.positions:
        positions = {
            node_id: [round(x, 2), round(y, 2)]
            for node_id, (x, y) in layout_vm.positions().items()
        }
        print(json.dumps(positions, indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
