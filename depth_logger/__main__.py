"""Allow ``python -m depth_logger`` to launch the session replayer."""

from __future__ import annotations

import sys


def main() -> None:
    from depth_logger import run
    raise SystemExit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
