"""trctl - remote control for a Transmission daemon."""

from __future__ import annotations

from trctl.cli.main import main

if __name__ == "__main__":
    main()
