"""winpdh-exporter command line.

Parsing lives in ``cli_parser`` and the command handlers in ``cli_actions``;
this module only dispatches. ``run`` is assumed when no command is given, so
``winpdh-exporter -c exporter.yaml`` starts the exporter.
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import handle_derive, handle_run, handle_validate
from .cli_parser import COMMANDS, build_parser

_HANDLERS = {
    "run": handle_run,
    "validate": handle_validate,
    "derive": handle_derive,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Parse ``argv`` (default ``sys.argv[1:]``) and return the exit code."""
    args_in = list(sys.argv[1:] if argv is None else argv)
    if not args_in or (args_in[0] not in COMMANDS and args_in[0] not in ("-h", "--help")):
        args_in.insert(0, "run")
    args = build_parser().parse_args(args_in)
    return _HANDLERS[args.cmd](args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
