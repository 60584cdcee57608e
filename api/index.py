from __future__ import annotations

import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    # `api/index.py` lives at `<repo>/api/index.py`
    src = Path(__file__).resolve().parents[1] / "src"
    if not src.is_dir():
        return
    s = str(src)
    if s not in sys.path:
        sys.path.insert(0, s)


_ensure_src_on_path()

from presley_site.api.main import create_app, run  # noqa: E402

# `uvicorn api.index:app --port 5000`
app = create_app()


if __name__ == "__main__":
    run()
