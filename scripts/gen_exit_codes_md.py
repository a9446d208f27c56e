#!/usr/bin/env python3
"""Generate docs/exit_codes.md from src/grin_codec/errors.py (single source of truth).

  gen_exit_codes_md.py           rewrite the doc
  gen_exit_codes_md.py --check   exit 1 if the doc is stale, write nothing
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO = Path(__file__).resolve().parents[1]
DOC = REPO / "docs" / "exit_codes.md"


def _render() -> str:
    sys.path.insert(0, str(REPO / "src"))

    from grin_codec import errors  # noqa: E402

    return errors.render_exit_codes_markdown()


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Render the GRIN exit-code table")
    ap.add_argument("--check", action="store_true", help="Compare only; exit 1 when stale")
    ns = ap.parse_args(argv)

    want = _render()
    if ns.check:
        have = DOC.read_text(encoding="utf-8") if DOC.is_file() else None
        if have != want:
            print(f"[grin] {DOC} is stale; run scripts/gen_exit_codes_md.py", file=sys.stderr)
            return 1
        print(f"[grin] {DOC} up to date")
        return 0

    DOC.parent.mkdir(parents=True, exist_ok=True)
    DOC.write_text(want, encoding="utf-8")
    print(f"[grin] wrote {DOC}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
