"""Launch CookieSifter from a source checkout: ``python src/run.py [report.json]``."""
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent


def _ensure_src_on_path() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))


def _print_version() -> int:
    # Answered before Qt is imported
    from core.app_version import get_app_version

    print(f"CookieSifter {get_app_version()}")
    return 0


if __name__ == "__main__":
    _ensure_src_on_path()
    if "--version" in sys.argv[1:] or "-V" in sys.argv[1:]:
        sys.exit(_print_version())

    from app.main import main

    sys.exit(main())
