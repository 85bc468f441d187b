"""Command-line interface for the DANE hook."""

from __future__ import annotations

import logging
import sys
from typing import List

from ..config import build_config
from ..errors import DaneHookError, exit_code_for_error
from ..output import to_json, to_text
from ..runner import run_hook
from .parser import _setup_logging, build_parser

LOGGER = logging.getLogger(__name__)

__all__ = ["_setup_logging", "build_parser", "main"]


def main(argv: List[str] | None = None) -> int:
    """Run the CLI entrypoint.

    Args:
        argv (List[str] | None): Optional argument list for parsing.

    Returns:
        int: Exit code (0 on success, see ``ExitCodes`` for failures).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)
    LOGGER.debug("Parsed arguments: %s", args)

    try:
        config = build_config(
            {
                "key_file": args.key_file,
                "zone": args.zone,
                "lineage": args.lineage,
                "domains": args.domains,
                "port": args.port,
                "ttl": args.ttl,
                "dry_run": args.dry_run,
            },
            config_path=args.config_path,
        )
        LOGGER.info("Updating zone %s from %s", config.zone, config.lineage)
        result = run_hook(config)
    except DaneHookError as exc:
        LOGGER.error("%s", exc)
        return exit_code_for_error(exc)

    if args.output == "json":
        print(to_json(result))
    else:
        print(to_text(result, show_changes=config.dry_run))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
