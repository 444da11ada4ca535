"""
Command-line entry point: one sweep, then exit.

    module-auditor [config path]

The config path may contain spaces without quoting; all positional words
are joined back together. Without a path, ./config.yaml is used.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from .catalog import Catalog
from .config import AuditConfig, load_config
from .exceptions import ConfigError, StoreConnectionError
from .host import detect_host
from .scanner import AuditScanner
from .store import init_store
from .versioninfo import PEVersionReader

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def log_file_name(when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    return f"module-auditor-{when:%Y-%m-%d-%H-%M-%S-%f}.log"


def setup_logging(config: AuditConfig) -> Optional[Path]:
    """
    Configure console logging plus a per-run log file.

    Returns the log file path, or None if the file could not be opened.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.log_level))

    if not root.handlers:
        logging.basicConfig(level=getattr(logging, config.log_level), format=LOG_FORMAT)

    log_path = config.resolved_log_dir / log_file_name()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Unable to open log file {log_path}: {e}")
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return log_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="module-auditor",
        description="Inventory binaries on this host and flag known-bad versions",
    )
    parser.add_argument(
        "config_path",
        nargs="*",
        help="Path to config file (default: ./config.yaml)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for module-auditor."""
    args = build_parser().parse_args(argv)
    config_path = " ".join(args.config_path) or None

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Config error: {e}")
        return 1

    log_path = setup_logging(config)

    try:
        store = init_store(config.database.url())
    except StoreConnectionError as e:
        logger.error(f"Store error: {e}")
        return 1

    try:
        catalog = Catalog.load(store)
        host = detect_host()
        logger.info(f"Running on {host.name} ({host.ips_text or 'no addresses'})")

        scanner = AuditScanner(config, store, catalog, PEVersionReader(), host)
        summary = scanner.run()
    except StoreConnectionError as e:
        logger.error(f"Store error, sweep aborted: {e}")
        return 1
    finally:
        store.close()

    logger.info(
        f"Inventory: {summary.records_created} new, {summary.records_updated} updated"
    )
    if log_path is not None:
        logger.info(f"Wrote log to {log_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
