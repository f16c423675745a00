from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages and
defaults. Provides logic to translate raw argparse namespaces into
configuration overrides and the ordered list of targets.
"""

import argparse
import sys
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from allocdu.domain.constants import COLOR_MODES, IDENTITY_SCOPES, PROG_NAME
from allocdu.utils.i18n import i18n

# Options consuming the following token as their value
VALUE_OPTIONS = ("--scope", "--color", "--log-file")

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the allocdu CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=PROG_NAME,
        description=i18n.t("app.description"),
        epilog=i18n.t("app.epilog"),
        add_help=False,
        # Only exact option spellings are options; anything else is a target
        allow_abbrev=False,
    )

    p.add_argument(
        "targets",
        nargs="*",
        metavar="dir",
        help=i18n.t("cli.args.targets"),
    )

    # --- Report Content ---
    p.add_argument(
        "-a", "--all",
        dest="show_files",
        action="store_true",
        help=i18n.t("cli.args.all"),
    )
    p.add_argument(
        "-s", "--summarize",
        dest="summary_only",
        action="store_true",
        help=i18n.t("cli.args.summarize"),
    )
    p.add_argument(
        "-x", "--exact",
        dest="exact_bytes",
        action="store_true",
        help=i18n.t("cli.args.exact"),
    )

    # --- Hard-Link Deduplication ---
    p.add_argument(
        "--track",
        dest="track_identity",
        action="store_true",
        help=i18n.t("cli.args.track"),
    )
    p.add_argument(
        "--scope",
        dest="identity_scope",
        choices=IDENTITY_SCOPES,
        default=None,
        help=i18n.t("cli.args.scope"),
    )

    # --- Traversal and Presentation ---
    p.add_argument(
        "-L", "--dereference",
        dest="follow_symlinks",
        action="store_true",
        help=i18n.t("cli.args.dereference"),
    )
    p.add_argument(
        "--color",
        choices=COLOR_MODES,
        default=None,
        help=i18n.t("cli.args.color"),
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help=i18n.t("cli.args.json"),
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help=i18n.t("cli.args.use_defaults"),
    )
    p.add_argument(
        "--save-defaults",
        action="store_true",
        help=i18n.t("cli.args.save_defaults"),
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help=i18n.t("cli.args.dump_config"),
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help=i18n.t("cli.args.verbose"),
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help=i18n.t("cli.args.debug"),
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help=i18n.t("cli.args.log_file"),
    )
    p.add_argument(
        "-?", "-h", "--help",
        action="help",
        help=i18n.t("cli.args.help"),
    )

    return p


def parse_cli(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse the command line; tokens the parser does not recognize are targets.

    The resulting 'targets' attribute keeps the command-line order.
    """
    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)
    args.targets = _in_argv_order(list(argv) if argv is not None else None, args.targets + unknown)
    return args

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration override dictionary.

    Switches only override the saved defaults when they are given, so a
    preference saved as True is not reset by an absent flag.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    for flag in ("show_files", "summary_only", "exact_bytes", "track_identity", "follow_symlinks"):
        if getattr(args, flag, False):
            overrides[flag] = True

    if args.identity_scope:
        overrides["identity_scope"] = args.identity_scope
    if args.color:
        overrides["color"] = args.color

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _in_argv_order(argv: Optional[List[str]], tokens: List[str]) -> List[str]:
    """Reorder target tokens the way they appeared on the command line."""
    if argv is None:
        argv = sys.argv[1:]

    remaining = Counter(tokens)
    ordered: List[str] = []
    skip_value = False
    for tok in argv:
        if skip_value:
            skip_value = False
            continue
        if tok in VALUE_OPTIONS:
            skip_value = True
            continue
        if remaining[tok] > 0:
            ordered.append(tok)
            remaining[tok] -= 1
    # Tokens not found verbatim in argv keep their parse order
    ordered.extend(remaining.elements())
    return ordered
