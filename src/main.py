"""Run the CLI from a checkout: `python src/main.py clean --test-mode`.

The installed console script is `jellyfin-cleaner`.
"""

from __future__ import annotations

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
