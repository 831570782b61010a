from dataclasses import dataclass
from os import environ
from pathlib import PurePosixPath, PureWindowsPath
from typing import Mapping, MutableMapping

from sumchain.chain import DEFAULT_CHUNK_SIZE
from sumchain.hashing import DEFAULT_ALGORITHM, is_supported


ENV_PREFIX = "SUMCHAIN_"


@dataclass(frozen=True)
class SumchainConfig:
    algorithm: str = DEFAULT_ALGORITHM
    chunk_size: int = DEFAULT_CHUNK_SIZE
    home: str = "."
    log_enabled: bool = False
    log_path: str = ".sumchain/logs/sumchain.jsonl"
    log_schema_version: str = "1"

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", (self.algorithm or "").strip().lower())
        object.__setattr__(self, "log_path", (self.log_path or "").strip())

    def validate(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if not is_supported(self.algorithm):
            raise ValueError(f"algorithm {self.algorithm!r} is not a supported fixed-length hash")
        if not (self.home or "").strip():
            raise ValueError("home must be set")
        if self.log_enabled:
            if not self.log_path:
                raise ValueError("log_path must be set when logging is enabled")
            log_posix = PurePosixPath(self.log_path)
            log_windows = PureWindowsPath(self.log_path)
            if log_posix.is_absolute() or log_windows.is_absolute() or log_windows.drive:
                raise ValueError("log_path must be a relative path")
            if self.log_path.startswith("~"):
                raise ValueError("log_path must not start with ~")
            if ".." in log_posix.parts or ".." in log_windows.parts:
                raise ValueError("log_path must not contain parent directory traversal")
            if not (self.log_schema_version or "").strip():
                raise ValueError("log_schema_version must be set when logging is enabled")


def _coerce_bool(value: str) -> bool:
    truthy = {"1", "true", "yes", "on"}
    falsy = {"0", "false", "no", "off"}
    lowered = value.strip().lower()
    if lowered in truthy:
        return True
    if lowered in falsy:
        return False
    raise ValueError(f"Invalid boolean value: {value}")


def _coerce_int(value: str, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid integer for {field}: {value}") from exc


def _get_env(env: Mapping[str, str], key: str) -> str | None:
    return env.get(f"{ENV_PREFIX}{key}")


def load_config(env: Mapping[str, str] | None = None) -> SumchainConfig:
    source: Mapping[str, str] | MutableMapping[str, str] = environ if env is None else env

    algorithm = _get_env(source, "ALGORITHM") or SumchainConfig.algorithm

    chunk_raw = _get_env(source, "CHUNK_SIZE")
    chunk_size = _coerce_int(chunk_raw, "chunk_size") if chunk_raw is not None else SumchainConfig.chunk_size

    home = _get_env(source, "HOME") or SumchainConfig.home

    log_enabled_raw = _get_env(source, "LOG_ENABLED")
    log_enabled = (
        _coerce_bool(log_enabled_raw) if log_enabled_raw is not None else SumchainConfig.log_enabled
    )

    log_path = _get_env(source, "LOG_PATH") or SumchainConfig.log_path
    log_schema_version = _get_env(source, "LOG_SCHEMA_VERSION") or SumchainConfig.log_schema_version

    cfg = SumchainConfig(
        algorithm=algorithm,
        chunk_size=chunk_size,
        home=home,
        log_enabled=log_enabled,
        log_path=log_path,
        log_schema_version=log_schema_version,
    )
    cfg.validate()
    return cfg


__all__ = ["SumchainConfig", "load_config"]
