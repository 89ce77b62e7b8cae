"""Run mistral-cli from a checkout without installing it.

    python main.py chat "hello"
    python main.py config generate --path ./config.env

Same commands as the `mistral-cli` script; `src/` is put on the path first.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    project_root = Path(__file__).resolve().parent
    src = project_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
