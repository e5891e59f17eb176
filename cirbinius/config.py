"""Service configuration read from environment variables."""

from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

_U16_MAX = 0xFFFF
_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


def _env(environ: Mapping[str, str], key: str, default: str) -> str:
    return environ.get(key, default)


def _env_int(environ: Mapping[str, str], key: str, default: int, maximum: int = _U64_MAX) -> int:
    raw = environ.get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if not 0 <= value <= maximum or raw.strip() != raw:
        return default
    return value


@dataclass
class Config:
    """Runtime settings for the API service."""

    host: str = "0.0.0.0"
    port: int = 3000
    upload_dir: Path = Path("/tmp/cirbinius/uploads")
    artifact_dir: Path = Path("/tmp/cirbinius/artifacts")
    worker_count: int = 4
    worker_poll_interval_ms: int = 1000
    conformance_fixtures_dir: Path = Path("/tmp/cirbinius/fixtures")
    max_upload_size_bytes: int = 100 * 1024 * 1024
    allowed_upload_extensions: list[str] = field(
        default_factory=lambda: ["r1cs", "sym", "json", "wasm", "cbir"]
    )
    circom_bin: str = "circom"
    snarkjs_bin: str = "snarkjs"
    sandbox_timeout: float = 300.0
    sandbox_memory_limit_mb: int = 2048
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build a configuration from CIRBINIUS_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        extensions = _env(env, "CIRBINIUS_ALLOWED_UPLOAD_EXTENSIONS", "r1cs,sym,json,wasm,cbir")
        return cls(
            host=_env(env, "CIRBINIUS_HOST", "0.0.0.0"),
            port=_env_int(env, "CIRBINIUS_PORT", 3000, _U16_MAX),
            upload_dir=Path(_env(env, "CIRBINIUS_UPLOAD_DIR", "/tmp/cirbinius/uploads")),
            artifact_dir=Path(_env(env, "CIRBINIUS_ARTIFACT_DIR", "/tmp/cirbinius/artifacts")),
            worker_count=_env_int(env, "CIRBINIUS_WORKER_COUNT", 4),
            worker_poll_interval_ms=_env_int(env, "CIRBINIUS_WORKER_POLL_INTERVAL_MS", 1000),
            conformance_fixtures_dir=Path(
                _env(env, "CIRBINIUS_CONFORMANCE_FIXTURES_DIR", "/tmp/cirbinius/fixtures")
            ),
            max_upload_size_bytes=_env_int(
                env, "CIRBINIUS_MAX_UPLOAD_SIZE_BYTES", 100 * 1024 * 1024
            ),
            allowed_upload_extensions=[part.strip().lower() for part in extensions.split(",")],
            circom_bin=_env(env, "CIRBINIUS_CIRCOM_BIN", "circom"),
            snarkjs_bin=_env(env, "CIRBINIUS_SNARKJS_BIN", "snarkjs"),
            sandbox_timeout=float(_env_int(env, "CIRBINIUS_SANDBOX_TIMEOUT_SECS", 300)),
            sandbox_memory_limit_mb=_env_int(env, "CIRBINIUS_SANDBOX_MEMORY_LIMIT_MB", 2048),
            log_level=_env(env, "CIRBINIUS_LOG_LEVEL", "info"),
        )

    def addr(self) -> tuple[str, int]:
        """Return the (host, port) pair to listen on; the host must be an IP address."""
        try:
            ipaddress.ip_address(self.host)
        except ValueError as exc:
            raise ValueError(f"invalid socket address: {self.host}:{self.port}") from exc
        return self.host, self.port