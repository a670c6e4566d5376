"""Module entrypoint for ``python -m milestone_planner``."""

from __future__ import annotations

from milestone_planner.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
