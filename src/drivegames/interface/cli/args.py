from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the explorer and translates the parsed
namespace into settings overrides.
"""

import argparse
from typing import Any, Dict, Optional

from drivegames.infra.logging import get_default_log_path

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the drivegames CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="drivegames",
        description="Browse a cloud-drive folder of learning games and open them by type.",
    )

    # --- Bootstrap inputs ---
    p.add_argument(
        "--root",
        dest="root_folder_id",
        default=None,
        help="Root folder id to browse (overrides settings and environment).",
    )
    p.add_argument(
        "--api-key",
        dest="api_key",
        default=None,
        help="Drive API key (overrides settings and environment).",
    )
    p.add_argument(
        "--settings",
        dest="settings_path",
        default=None,
        help="Path to an alternative settings JSON file.",
    )

    # --- Diagnostics and output ---
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log",
        action="store_true",
        help="Also write diagnostics to the rotating log file in the user data directory.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Write diagnostics to this rotating log file instead (implies --log).",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Emit machine-readable JSON instead of text.",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    tree = sub.add_parser("tree", help="Print the folder tree.")
    tree.add_argument(
        "--depth",
        type=int,
        default=1,
        help="How many container levels to expand below the root (default: 1).",
    )

    open_cmd = sub.add_parser("open", help="Resolve a document and mount its game.")
    open_cmd.add_argument("document_id", help="Id of the JSON document to open.")

    sub.add_parser("state", help="Show the persisted navigation state and cache sizes.")
    sub.add_parser("clear-cache", help="Purge every cache tier.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Map CLI flags onto settings fields. Flags left unset are omitted.

    Args:
        args: Parsed namespace.

    Returns:
        Dict[str, Any]: Field name -> override value.
    """
    overrides: Dict[str, Any] = {}
    if args.root_folder_id:
        overrides["root_folder_id"] = args.root_folder_id.strip()
    if args.api_key:
        overrides["api_key"] = args.api_key.strip()
    if args.debug:
        overrides["log_level"] = "DEBUG"
    return overrides


def resolve_log_file(args: argparse.Namespace) -> Optional[str]:
    """Target of file logging, or None when only the console is wanted."""
    if args.log_file:
        return args.log_file
    if args.log:
        return get_default_log_path()
    return None
