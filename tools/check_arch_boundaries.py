#!/usr/bin/env python3
"""Run the import-direction check outside pytest (e.g. in a pre-commit hook)."""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    test_path = repo_root / "tests" / "test_arch_boundaries.py"
    if not test_path.is_file():
        print("[grin] tests/test_arch_boundaries.py not found", file=sys.stderr)
        return 3

    spec = importlib.util.spec_from_file_location("_arch_boundaries", test_path)
    mod = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = mod
    spec.loader.exec_module(mod)

    violations = mod.find_violations(repo_root / "src")
    if violations:
        for v in violations:
            print(f"{v.file}:{v.lineno}  {v.src}  ->  {v.dst}", file=sys.stderr)
        return 2
    print("OK: architecture boundaries respected.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
