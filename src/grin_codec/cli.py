"""GRIN CLI.

This is the stable CLI entrypoint (console-script: ``grin``).

  grin encode INPUT OUTPUT
  grin decode INPUT OUTPUT
  grin verify INPUT [--full] [--json]
  grin show INPUT
  grin bench INPUT [--json] [--zstd-level N]

Outputs are written to a temp file next to the destination and renamed on
success (disable with GRIN_ATOMIC=0), so a failed run never leaves a partial
OUTPUT behind.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from grin_codec.config import ZSTD_LEVEL_MAX, ZSTD_LEVEL_MIN, Settings, load_settings
from grin_codec.errors import EXIT_GENERIC, EXIT_OK, GrinError, GrinIOError, UsageError

PROG = "grin"


def _pkg_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("grin-codec")
    except PackageNotFoundError:
        # script invoked from source, metadata missing
        return "0+unknown"


def _log(msg: str) -> None:
    print(f"[{PROG}] {msg}", file=sys.stderr)


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")
    p.add_argument("-v", "--verbose", action="store_true", help="Print a summary line to stderr")


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


@contextmanager
def _output_path(target: Path, *, atomic: bool) -> Iterator[Path]:
    """Yield the path to write to; rename it onto target on success."""
    if not atomic:
        yield target
        return

    parent = target.parent
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=parent)
    except OSError as err:
        raise GrinIOError(f"cannot create output in {parent}: {err.strerror or err}") from err
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        yield tmp
        # mkstemp creates 0600; match what a plain open() would give
        os.chmod(tmp, 0o666 & ~_current_umask())
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _run_codec(fn: Callable, input_path: Path, output_path: Path, settings: Settings):
    with _output_path(output_path, atomic=settings.atomic) as out:
        return fn(input_path, out, chunk_size=settings.read_chunk)


def _cmd_encode(ns: argparse.Namespace, settings: Settings) -> int:
    from grin_codec.engine.container import encode_file

    rep = _run_codec(encode_file, ns.input, ns.output, settings)
    if ns.verbose:
        _log(
            f"encode: in={rep.bytes_in} out={rep.bytes_out} ratio={rep.ratio:.3f} "
            f"leaves={rep.leaves} tree_bits={rep.tree_bits} payload_bits={rep.payload_bits}"
        )
    return EXIT_OK


def _cmd_decode(ns: argparse.Namespace, settings: Settings) -> int:
    from grin_codec.engine.container import decode_file

    rep = _run_codec(decode_file, ns.input, ns.output, settings)
    if ns.verbose:
        _log(
            f"decode: in={rep.bytes_in} out={rep.bytes_out} "
            f"leaves={rep.leaves} tree_bits={rep.tree_bits} payload_bits={rep.payload_bits}"
        )
    return EXIT_OK


def _print_verify_json(
    target: Path, *, full: bool, summary=None, error: GrinError | None = None
) -> None:
    obj = {
        "schema": "grin.verify.v1",
        "ok": error is None,
        "target": str(target),
        "full": bool(full),
        "version": _pkg_version(),
    }
    if summary is not None:
        obj["leaves"] = summary.leaves
        obj["height"] = summary.height
        obj["tree_bits"] = summary.tree_bits
        if summary.full:
            obj["payload_bits"] = summary.payload_bits
            obj["decoded_size"] = summary.decoded_size
    if error is not None:
        obj["error"] = {"type": type(error).__name__, "message": str(error)}
        print(json.dumps(obj, ensure_ascii=False, sort_keys=True), file=sys.stderr)
        return
    print(json.dumps(obj, ensure_ascii=False, separators=(",", ":")))


def _cmd_verify(ns: argparse.Namespace, settings: Settings) -> int:
    from grin_codec.verify import verify_grin_file

    if not ns.json:
        summary = verify_grin_file(ns.input, full=bool(ns.full))
        if ns.verbose:
            line = (
                f"verify: leaves={summary.leaves} height={summary.height} "
                f"tree_bits={summary.tree_bits}"
            )
            if summary.full:
                line += f" payload_bits={summary.payload_bits} decoded={summary.decoded_size}"
            _log(line)
        print("OK")
        return EXIT_OK

    try:
        summary = verify_grin_file(ns.input, full=bool(ns.full))
    except GrinError as e:
        if ns.debug or settings.debug:
            raise
        _print_verify_json(ns.input, full=bool(ns.full), error=e)
        return int(e.exit_code)
    _print_verify_json(ns.input, full=bool(ns.full), summary=summary)
    return EXIT_OK


def _cmd_show(ns: argparse.Namespace, settings: Settings) -> int:
    from grin_codec.verify import describe_grin_file, format_symbol

    rows = describe_grin_file(ns.input)
    print(f"# {ns.input}: {len(rows)} symbols")
    for sym, code in rows:
        print(f"{format_symbol(sym):<12} len={code.length:<3} {code}")
    return EXIT_OK


def _cmd_bench(ns: argparse.Namespace, settings: Settings) -> int:
    from grin_codec.bench import bench_file, bench_report

    level = int(ns.zstd_level) if ns.zstd_level is not None else settings.zstd_level
    if not ZSTD_LEVEL_MIN <= level <= ZSTD_LEVEL_MAX:
        raise UsageError(
            f"--zstd-level must be in {ZSTD_LEVEL_MIN}..{ZSTD_LEVEL_MAX}, got {level}"
        )
    rows = bench_file(ns.input, zstd_level=level)
    if ns.json:
        print(json.dumps(bench_report(ns.input, rows, zstd_level=level), separators=(",", ":")))
        return EXIT_OK
    for r in rows:
        print(
            f"{r.codec:<5} in={r.size_in} out={r.size_out} ratio={r.ratio:.3f} "
            f"c={r.t_compress * 1000:.1f}ms d={r.t_decompress * 1000:.1f}ms"
        )
    return EXIT_OK


_COMMANDS: dict[str, Callable[[argparse.Namespace, Settings], int]] = {
    "encode": _cmd_encode,
    "decode": _cmd_decode,
    "verify": _cmd_verify,
    "show": _cmd_show,
    "bench": _cmd_bench,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=PROG, description="GRIN Huffman file compressor")
    p.add_argument("--version", action="version", version=f"%(prog)s {_pkg_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_e = sub.add_parser("encode", help="Compress INPUT into a GRIN file")
    p_e.add_argument("input", type=Path)
    p_e.add_argument("output", type=Path)
    _add_common_args(p_e)

    p_d = sub.add_parser("decode", help="Decompress a GRIN file")
    p_d.add_argument("input", type=Path)
    p_d.add_argument("output", type=Path)
    _add_common_args(p_d)

    p_v = sub.add_parser("verify", help="Verify a GRIN file")
    p_v.add_argument("input", type=Path)
    p_v.add_argument("--full", action="store_true", help="Decode the whole payload")
    p_v.add_argument("--json", action="store_true", help="Machine-readable result")
    _add_common_args(p_v)

    p_s = sub.add_parser("show", help="Print the code table of a GRIN file")
    p_s.add_argument("input", type=Path)
    _add_common_args(p_s)

    p_b = sub.add_parser("bench", help="Compare GRIN with zlib/zstd on INPUT")
    p_b.add_argument("input", type=Path)
    p_b.add_argument("--json", action="store_true", help="Machine-readable result")
    p_b.add_argument(
        "--zstd-level",
        type=int,
        default=None,
        help="zstd level (default: GRIN_ZSTD_LEVEL or 19)",
    )
    _add_common_args(p_b)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)
    settings = load_settings()
    debug = bool(getattr(ns, "debug", False)) or settings.debug

    try:
        return _COMMANDS[ns.cmd](ns, settings)
    except SystemExit:
        raise
    except GrinError as e:
        if debug:
            raise
        _log(str(e))
        return int(e.exit_code)
    except Exception as e:
        if debug:
            raise
        _log(f"error: {e}")
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
