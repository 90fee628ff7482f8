from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, settings resolution
(file, environment, flags), explorer construction and command routing.
Failures are reported as the same user-facing messages the explorer
shows in its content area.
"""

import json
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

from drivegames.core.explorer import ExplorerController
from drivegames.domain.config import ExplorerSettings, load_settings, validate_settings
from drivegames.domain.errors import ConfigurationError, DriveGamesError, RemoteError, user_message
from drivegames.domain.models import Node
from drivegames.infra.logging import LoggingConfig, configure_logging, get_logger
from drivegames.interface.cli import args as cli_args
from drivegames.renderers.base import ViewStatus

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 configuration, 130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Settings resolution (file < environment < flags)
    settings = load_settings(args.settings_path)
    overrides = cli_args.args_to_overrides(args)
    if overrides:
        settings = replace(settings, **overrides)

    # 3. Logging bootstrap (CLI-specific: console stderr)
    log_file = cli_args.resolve_log_file(args)
    configure_logging(LoggingConfig(level=settings.log_level, console=True, log_file=log_file))
    logger.debug(f"CLI command '{args.command}' with settings {settings.to_dict()}")

    # 4. Command execution phase
    controller: Optional[ExplorerController] = None
    try:
        if args.command in ("tree", "open"):
            validate_settings(settings)
        controller = build_controller(settings)

        if args.command == "tree":
            return _cmd_tree(controller, args.depth, args.json_output)
        if args.command == "open":
            return _cmd_open(controller, args.document_id, args.json_output)
        if args.command == "state":
            return _cmd_state(controller, args.json_output)
        if args.command == "clear-cache":
            return _cmd_clear_cache(controller)

        parser.error(f"Unknown command {args.command!r}")
        return EXIT_CONFIG

    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"ERROR: {user_message(e)} {e}", file=sys.stderr)
        return EXIT_CONFIG
    except DriveGamesError as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        print(f"ERROR: {user_message(e)}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        logger.critical(f"Unexpected failure: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        if controller is not None:
            controller.close()


def build_controller(settings: ExplorerSettings) -> ExplorerController:
    return ExplorerController(settings)

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _cmd_tree(controller: ExplorerController, depth: int, as_json: bool) -> int:
    root = controller.start()
    failures = _expand_levels(controller, controller.state.nodes, max(depth, 1) - 1)
    rows = controller.visible_nodes()

    if as_json:
        payload = {
            "root": {"id": root.id, "name": controller.state.root_name},
            "nodes": [_node_row(depth_, node) for depth_, node in rows],
            "failed": failures,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(controller.state.root_name)
        for depth_, node in rows:
            print(_render_row(controller, depth_, node))
        if not rows:
            print("  (empty)")
        for node_id in failures:
            print(f"WARNING: could not load {node_id}", file=sys.stderr)

    return EXIT_OK if not failures else EXIT_FAILURE


def _cmd_open(controller: ExplorerController, document_id: str, as_json: bool) -> int:
    resolved = controller.resolve(document_id)
    handle = controller.dispatcher.dispatch(
        document_id, resolved.resolved_type, resolved.payload, controller.container
    )
    view = handle.wait()

    if as_json:
        print(json.dumps({
            "document_id": document_id,
            "game_type": resolved.resolved_type,
            "renderer": resolved.renderer_id,
            "inferred": resolved.inferred,
            "status": view.status.value,
            "title": view.title,
            "error": view.error,
            "model": view.model,
        }, ensure_ascii=False, indent=2))
    else:
        print(f"Game type: {resolved.resolved_type}{' (inferred)' if resolved.inferred else ''}")
        print(f"Renderer:  {resolved.renderer_id}")
        if view.status is ViewStatus.READY:
            print(f"Title:     {view.title}")
        else:
            print(f"ERROR: {view.error}", file=sys.stderr)

    return EXIT_OK if view.status is ViewStatus.READY else EXIT_FAILURE


def _cmd_state(controller: ExplorerController, as_json: bool) -> int:
    controller.navigation.load()
    snapshot = controller.snapshot()
    if as_json:
        print(json.dumps(snapshot, ensure_ascii=False, indent=2))
    else:
        nav = snapshot["navigation"]
        print(f"Selected:        {nav.get('selected_id') or '-'}")
        print(f"Collapsed:       {len(nav.get('collapsed_ids', []))}")
        print(f"Drawer open:     {nav.get('drawer_open')}")
        print(f"Durable entries: {snapshot['durable_entries']}")
    return EXIT_OK


def _cmd_clear_cache(controller: ExplorerController) -> int:
    controller.cache.reset()
    controller.payload_cache.clear()
    print("Cache cleared.")
    return EXIT_OK

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _expand_levels(controller: ExplorerController, nodes: List[Node], remaining: int) -> List[str]:
    """Expand containers breadth-wise down to `remaining` levels; returns ids that failed."""
    failed: List[str] = []
    if remaining <= 0:
        return failed
    for node in nodes:
        if not node.is_container or controller.is_collapsed(node):
            continue
        try:
            children = controller.expand(node.id)
        except RemoteError as e:
            logger.warning(f"Could not expand '{node.name}': {user_message(e)}")
            failed.append(node.id)
            continue
        failed.extend(_expand_levels(controller, children, remaining - 1))
    return failed


def _render_row(controller: ExplorerController, depth: int, node: Node) -> str:
    indent = "  " * (depth + 1)
    if node.is_container:
        marker = "[+]" if (controller.is_collapsed(node) or not node.loaded) else "[-]"
        return f"{indent}{marker} {node.name}"
    return f"{indent}    {node.display_name} ({node.kind.value if node.kind else 'other'})"


def _node_row(depth: int, node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "name": node.name,
        "depth": depth,
        "container": node.is_container,
        "kind": node.kind.value if node.kind else None,
        "loaded": node.loaded,
    }

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
