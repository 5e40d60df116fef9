"""Demo launcher for `python -m tableview`.

Shows the alphabet list (or ``--rows N`` numbered rows); clicking a row pops
up a message box naming it.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .app.bootstrap import create_app
from .data_sources import SequenceDataSource, alphabet
from .models import RowIndex

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tableview", description="Virtualized list demo")
    parser.add_argument("--rows", type=int, default=None, help="Show N numbered rows instead of A-Z")
    parser.add_argument("--config-dir", default=None, help="Directory holding tableview_config.json")
    parser.add_argument("--compact", action="store_true", help="Compact density")
    parser.add_argument("--striped", action="store_true", help="Striped row variant")
    parser.add_argument("--verbose", action="store_true", help="Log cell pool activity")
    return parser


def main(argv: list[str] | None = None) -> int:  # pragma: no cover - runtime
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx = create_app(headless=False, config_dir=args.config_dir, install_hooks=True)
    if ctx.qt_app is None:
        log.error("PyQt6 is required for the demo window")
        return 1

    from PyQt6.QtWidgets import QMessageBox

    from .components import VirtualizedList

    if args.rows is not None:
        provider = SequenceDataSource.from_items([f"Row {i}" for i in range(args.rows)])
    else:
        provider = alphabet()

    view = VirtualizedList(
        provider,
        density="compact" if args.compact else None,
        variant="striped" if args.striped else None,
        config=ctx.config,
        event_bus=ctx.event_bus,
    )

    def show_row(index: RowIndex) -> None:
        text = provider.item_at(index)
        QMessageBox.information(view, "Row selected", f"You selected {text}")

    view.set_activation_handler(show_row)
    view.setWindowTitle("tableview demo")
    view.resize(320, 480)
    view.show()
    try:
        return ctx.qt_app.exec()
    finally:
        log.info("Pool stats: %s", view.table.pool.stats().as_dict())
        ctx.error_service.uninstall()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
