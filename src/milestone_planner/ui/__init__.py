"""CLI router and plain-text rendering."""

from milestone_planner.ui.cli import CLIError, build_parser, run_cli
from milestone_planner.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIError", "CLIRenderer", "build_parser", "create_renderer", "run_cli"]
