from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Final

from dotenv import load_dotenv

from rmtagsync.app import sync_rootsmagic_tags
from rmtagsync.config import (
    DIGIKAM_DB_ENV,
    ROOTSMAGIC_DB_ENV,
    ConfigurationError,
    configure_logging,
    get_database_config,
    get_sync_config,
)
from rmtagsync.domain.model import DEFAULT_CATCH_ALL_BRANCH, DEFAULT_PRIMARY_BRANCH

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from rmtagsync.config import SyncOptions

log = logging.getLogger(__name__)

# Conventional status of a process ended by SIGINT.
INTERRUPTED_EXIT_CODE: Final[int] = 130


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rmtagsync",
        description="Synchronise RootsMagic people into digiKam tags",
        epilog=(
            "Close digiKam before running. Tags are matched by RootsMagic OwnerID, "
            "so existing photo associations are preserved."
        ),
    )
    parser.add_argument(
        "-r",
        "--rootsmagic",
        type=str,
        help=f"Path to the RootsMagic database (.rmtree/.rmgc, defaults to ${ROOTSMAGIC_DB_ENV})",
    )
    parser.add_argument(
        "-d",
        "--digikam",
        type=str,
        help=f"Path to the digiKam database (digikam4.db, defaults to ${DIGIKAM_DB_ENV})",
    )
    parser.add_argument(
        "-p",
        "--parent-tag",
        type=str,
        help=f"Parent tag for RootsMagic people (default: {DEFAULT_PRIMARY_BRANCH})",
    )
    parser.add_argument(
        "-l",
        "--lost-found",
        type=str,
        help=f"Tag collecting people no longer in RootsMagic (default: {DEFAULT_CATCH_ALL_BRANCH})",
    )
    parser.add_argument(
        "--no-legacy-repair",
        action="store_true",
        help="Do not bind or rename tags written by older versions",
    )
    parser.add_argument(
        "--no-snapshot",
        action="store_true",
        help="Skip the backup tables and rely on the database rollback alone",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(list(argv))


def _build_options(args: argparse.Namespace) -> SyncOptions:
    return get_sync_config().with_overrides(
        primary_branch=args.parent_tag,
        catch_all_branch=args.lost_found,
        repair_legacy=False if args.no_legacy_repair else None,
        use_snapshot=False if args.no_snapshot else None,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    load_dotenv()
    signal(SIGINT, sigint_handler)
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        options = _build_options(parsed_args)
        databases = get_database_config(
            rootsmagic_path=parsed_args.rootsmagic, digikam_path=parsed_args.digikam
        )
    except (ConfigurationError, ValueError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = sync_rootsmagic_tags(
            rootsmagic_path=databases.rootsmagic_path,
            digikam_path=databases.digikam_path,
            options=options,
        )
    except Exception:
        log.exception("Synchronization failed")
        sys.exit(1)

    if result.failed:
        log.warning(
            "%s people could not be placed in the tag tree, see errors above", result.failed
        )
    log.info("Synchronization completed. You can now start digiKam to see the updated tags.")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Abort on SIGINT (Ctrl+C); a sync in progress is rolled back on the way out."""
    log.warning("Interrupted by user (Ctrl+C)")
    sys.exit(INTERRUPTED_EXIT_CODE)


if __name__ == "__main__":
    main()
