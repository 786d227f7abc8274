#!/usr/bin/env python3
"""
Git Mirror Migrate - Mirror all repositories between a GitLab instance and
a GitHub user or organization, in either direction.

Source repositories are listed, a private destination repository is ensured
for each one, and full history is synchronized through a local bare mirror
(clone or prune-fetch, then mirror push). Re-runs update the existing local
mirrors incrementally. Configuration comes from the environment and an
optional .env file in the working directory.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from env_config import load_config, resolve_direction
from errors import ConfigurationError
from logging_utils import Logger
from sync_orchestrator import SyncOrchestrator

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


def main() -> NoReturn:
    if __name__ != "__main__":
        sys.exit(EXIT_EXECUTION_ERROR)

    try:
        cfg = load_config()
        direction = resolve_direction(cfg)
    except ConfigurationError as e:
        Logger.error(e.message)
        sys.exit(EXIT_EXECUTION_ERROR)
    except (EOFError, KeyboardInterrupt):
        Logger.error("no migration direction given")
        sys.exit(EXIT_EXECUTION_ERROR)

    orchestrator = SyncOrchestrator(cfg)
    sys.exit(orchestrator.run(direction))


if __name__ == "__main__":
    main()
