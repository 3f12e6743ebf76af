"""Точка входа в приложение."""
from __future__ import annotations

import argparse
import logging
import sys
from tkinter import TclError
from typing import List, Optional

from ctiview import config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ctiview", description="Просмотр изображений CTI")
    parser.add_argument("path", nargs="?", help="файл .cti, открываемый при запуске")
    parser.add_argument(
        "--strict-checksum",
        action="store_true",
        help="считать несовпадение CRC фатальной ошибкой",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="уровень журналирования (по умолчанию WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Создаёт и запускает главное окно приложения."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.strict_checksum:
        config.set_value("strict_checksum", True)

    try:
        # imported here so a missing display surfaces as a startup error, not an import error
        from ctiview.app import CtiViewerApp

        app = CtiViewerApp()
    except TclError as exc:
        logger.error(f"GUI subsystem unavailable: {exc}")
        return 1

    if args.path:
        app.open_path(args.path)
    app.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
