"""Runtime settings for GRIN, read from the environment.

Parsing is tolerant: an unparsable value falls back to the default.
CLI flags take precedence over anything read here.

  GRIN_ATOMIC=0        write outputs in place (default: temp file + rename)
  GRIN_READ_CHUNK=N    BitReader buffer size in bytes (default: 65536)
  GRIN_ZSTD_LEVEL=N    zstd level used by `grin bench` (default: 19)
  GRIN_DEBUG=1         same as --debug
"""

from __future__ import annotations

import os
from dataclasses import dataclass

READ_CHUNK_DEFAULT = 64 * 1024
ZSTD_LEVEL_DEFAULT = 19
ZSTD_LEVEL_MIN = 1
ZSTD_LEVEL_MAX = 22


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)).strip())
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class Settings:
    atomic: bool = True
    read_chunk: int = READ_CHUNK_DEFAULT
    zstd_level: int = ZSTD_LEVEL_DEFAULT
    debug: bool = False


def load_settings() -> Settings:
    return Settings(
        atomic=_env_bool("GRIN_ATOMIC", True),
        read_chunk=max(1, _env_int("GRIN_READ_CHUNK", READ_CHUNK_DEFAULT)),
        zstd_level=min(
            ZSTD_LEVEL_MAX, max(ZSTD_LEVEL_MIN, _env_int("GRIN_ZSTD_LEVEL", ZSTD_LEVEL_DEFAULT))
        ),
        debug=_env_bool("GRIN_DEBUG", False),
    )
