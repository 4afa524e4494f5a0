"""Entry point for Elite Screenshots.

Usage:
    python -m elite_shots              Watch for new screenshots (Ctrl-C to stop)
    python -m elite_shots watch        Same as above
    python -m elite_shots convertold   Convert screenshots already in the folder
"""

import logging
import sys

logger = logging.getLogger(__name__)

USAGE = __doc__


def main() -> None:
    """Dispatch the command given on the command line."""
    from elite_shots.app import App, setup_logging
    from elite_shots.config import Config

    cmd = sys.argv[1].lower() if len(sys.argv) > 1 else "watch"

    config = Config()
    setup_logging(config)

    if cmd == "watch":
        try:
            App(config).watch()
        except FileNotFoundError:
            # Already logged by the watcher
            sys.exit(1)
    elif cmd == "convertold":
        result = App(config).convert_old()
        if result.failed:
            sys.exit(1)
    else:
        logger.error("Invalid command: '%s'.", cmd)
        print(USAGE)
        sys.exit(2)


if __name__ == "__main__":
    main()
