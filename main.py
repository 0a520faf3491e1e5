#!/usr/bin/env python3
"""
yt-notify

Watches a handful of YouTube channels and raises a desktop notification
when one of them uploads or goes live.
"""

import sys
from src.config.settings import WatcherConfig
from src.cli.commands import run


def main() -> None:
    """Main entry point."""
    try:
        # Load and validate configuration
        config = WatcherConfig.from_env()
        config.validate()

        run(sys.argv[1:], config)

    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("Watcher stopped by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
