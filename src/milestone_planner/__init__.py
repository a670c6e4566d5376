"""
milestone-planner: dependency analysis and calendar placement for milestone tasks.

The analysis side builds a per-request dependency graph, rejects cycles, runs
the critical path method and reports parallel tracks, skill conflicts,
ranked suggestions and schedule metrics. The scheduling side splits long
tasks and places them greedily into working-hours slots.

Importing the package has no side effects: no config is loaded and logging
is left untouched until the CLI sets it up.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
