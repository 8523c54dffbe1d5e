import asset_tagger.utils.i18n  # noqa: F401

"""Command line entry point.

Each folder next to this file is a subcommand exposing
``COMMAND_DESCRIPTION`` and ``command(subparser) -> handler``. Handlers
receive the parsed arguments with the loaded configuration in
``args.config``.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path
from typing import Dict, List, Optional

from asset_tagger import __version__
from asset_tagger.utils.config import load_config
from asset_tagger.utils.misc import load_module

logger = logging.getLogger(__name__)


def global_flags(parser: ArgumentParser):
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help=_("Log debug messages"),
    )


def discover_subcommands() -> Dict[str, object]:
    """Subcommand modules found beside this file, keyed by folder name."""
    found = {}
    for init in sorted(Path(__file__).parent.glob("*/__init__.py")):
        name = init.parent.name
        if name.startswith("_"):
            continue
        found[name] = load_module(init, module_name=f"asset_tagger.cli.{name}")
    return found


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="asset_tagger", formatter_class=ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    global_flags(parser)
    subparsers = parser.add_subparsers(dest="subcommand")
    for name, module in discover_subcommands().items():
        subparser = subparsers.add_parser(
            name,
            help=module.COMMAND_DESCRIPTION,
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        global_flags(subparser)
        subparser.set_defaults(fn=module.command(subparser))
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run a subcommand.

    Used by `python -m asset_tagger` and `$ asset_tagger`.
    """
    logging.basicConfig()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)
    logger.debug(f"{_('Starting')} asset_tagger v{__version__}")

    fn = getattr(args, "fn", None)
    if fn is None:
        parser.print_help()
        return 1
    args.config = load_config()
    fn(args)
    return 0
