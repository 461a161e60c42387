# ============================================================================
#  File: cli.py
#  Version: 1.0
#  Purpose: Command line checks for workflow definitions and stored templates
# ============================================================================
# SECTION 1: Imports
# ============================================================================
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml
from loguru import logger

from complaint_workflow.collaborators import InMemoryComplaintStore
from complaint_workflow.config_manager import ConfigManager
from complaint_workflow.error_handling import WorkflowConfigurationError, WorkflowError
from complaint_workflow.graph_model import WorkflowGraph
from complaint_workflow.log_setup import configure_logging
from complaint_workflow.notifications import build_default_services
from complaint_workflow.scheduler import compute_order
from complaint_workflow.workflow_service import WorkflowService
#
# ============================================================================
# SECTION 2: Helpers
# ============================================================================
# Function 2.1: load_definition
# ============================================================================
#
def load_definition(path: str) -> Dict[str, Any]:
    """Read a workflow definition from a .json, .yaml or .yml file."""
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a workflow definition object")
    return data


def build_service(config_manager: ConfigManager) -> WorkflowService:
    services = build_default_services(InMemoryComplaintStore(), config_manager)
    return WorkflowService(config_manager, services)
#
# ============================================================================
# SECTION 3: Commands
# ============================================================================
#
def cmd_validate(args: argparse.Namespace) -> int:
    service = build_service(ConfigManager(config_path=args.config))

    strict = True if args.strict else None
    report = service.validate_template(load_definition(args.file), strict=strict)
    print(json.dumps(report, indent=2))
    return 0 if report["valid"] else 1


def cmd_order(args: argparse.Namespace) -> int:
    graph = WorkflowGraph.from_definition(load_definition(args.file))
    try:
        order = compute_order(graph.nodes, graph.edges)
    except WorkflowConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    for position, node_id in enumerate(order, start=1):
        node = graph.get_node(node_id)
        print(f"{position:>3}. {node_id}  [{node.type}] {node.label}")
    return 0


def cmd_templates(args: argparse.Namespace) -> int:
    service = build_service(ConfigManager(config_path=args.config))
    templates = service.list_templates()
    if not templates:
        print("No stored workflow templates.")
        return 0
    for template in templates:
        print(
            f"{template['name']}: {template['display_name']} "
            f"({template['node_count']} nodes, {template['edge_count']} edges)"
        )
        if template["description"]:
            print(f"    {template['description']}")
    return 0
#
# ============================================================================
# SECTION 4: Entry Point
# ============================================================================
#
def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="complaint-workflow",
        description="Validate and inspect complaint workflow definitions.",
    )
    parser.add_argument("--config", default=None, help="Path to app_settings.json.")
    parser.add_argument("--log-level", default="WARNING", help="Console log level.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a workflow definition file.")
    validate.add_argument("file", help="Workflow definition (.json or .yaml).")
    validate.add_argument(
        "--strict",
        action="store_true",
        help="Treat unknown node types and unmatched custom labels as errors.",
    )
    validate.set_defaults(handler=cmd_validate)

    order = subparsers.add_parser("order", help="Print the execution order of a workflow.")
    order.add_argument("file", help="Workflow definition (.json or .yaml).")
    order.set_defaults(handler=cmd_order)

    templates = subparsers.add_parser("templates", help="List stored workflow templates.")
    templates.set_defaults(handler=cmd_templates)

    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    try:
        return args.handler(args)
    except (OSError, KeyError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Could not read workflow definition: {e}")
        return 2
    except WorkflowError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
#
#
## End Script
