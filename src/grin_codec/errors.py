"""Typed errors for GRIN.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_BAD_FORMAT = 11
EXIT_TRUNCATED = 12
EXIT_IO = 13
EXIT_INTERNAL = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, unknown command, etc.)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (unexpected error)"),
    ExitCodeInfo(EXIT_BAD_FORMAT, "BAD_FORMAT", "Not a GRIN file (bad magic, malformed tree, trailing data)"),
    ExitCodeInfo(EXIT_TRUNCATED, "TRUNCATED", "Bit stream ended before the tree or the end-of-stream code"),
    ExitCodeInfo(EXIT_IO, "IO", "Input/output file cannot be opened, read or written"),
    ExitCodeInfo(EXIT_INTERNAL, "INTERNAL", "Internal defect (code table lookup miss during encode)"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/grin_codec/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- All codec errors extend `GrinError` and carry an `exit_code`.\n")
    lines.append("- `--debug` (or `GRIN_DEBUG=1`) re-raises errors to show full stack traces.\n")
    lines.append(
        "- `--json` on `verify` prints a JSON object to stdout (ok) or stderr (error), and returns the same exit code.\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class GrinError(Exception):
    """Base error for GRIN."""

    exit_code: int = EXIT_GENERIC


class UsageError(GrinError):
    exit_code = EXIT_USAGE


class FormatError(GrinError):
    exit_code = EXIT_BAD_FORMAT


class BadMagic(FormatError):
    pass


class MalformedTree(FormatError):
    pass


class CorruptPayload(FormatError):
    pass


class TruncatedStream(GrinError):
    exit_code = EXIT_TRUNCATED


class GrinIOError(GrinError):
    exit_code = EXIT_IO


class InternalCodeTableError(GrinError):
    exit_code = EXIT_INTERNAL
