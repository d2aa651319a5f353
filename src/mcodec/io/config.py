"""
Configuration for the mcodec.io line service.

Defines ServiceSettings, a frozen dataclass carrying runtime configuration for
the service. Defaults are sourced from mcodec.core.constants (the single
source of truth).

Source of truth
- mcodec.core.constants.MAX_MESSAGE_BYTES, READ_CHUNK_SIZE

Import DAG discipline
- Depends only on stdlib and mcodec.core.constants.

Notes
- Precedence: environment (MCODEC_*) > TOML > defaults.
- Invalid values are ignored and the previous layer's value is kept.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from mcodec.core.constants import MAX_MESSAGE_BYTES as CORE_MAX_MESSAGE_BYTES
from mcodec.core.constants import READ_CHUNK_SIZE as CORE_READ_CHUNK_SIZE

logger = logging.getLogger(__name__)

DispatchMode = Literal["sequential", "concurrent"]
ErrorDetail = Literal["summary", "traceback"]

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_FIELDS = ("log_level", "dispatch_mode", "max_message_bytes", "read_chunk_size", "error_detail")


@dataclass(frozen=True)
class ServiceSettings:
    """
    Runtime settings for the line service.

    Attributes:
        log_level (str): Logging level name for the stderr log handler.
        dispatch_mode (Literal["sequential","concurrent"]): "sequential" answers
            requests one at a time in arrival order; "concurrent" schedules one task
            per request and answers in completion order.
        max_message_bytes (int): Largest partial message buffered before a framing error.
        read_chunk_size (int): Bytes requested from the input stream per read.
        error_detail (Literal["summary","traceback"]): How caught errors are rendered
            into Error responses: "Type: message", or the full formatted traceback.

    Examples:
        >>> from mcodec.io.config import ServiceSettings
        >>> ServiceSettings(dispatch_mode="concurrent")  # doctest: +ELLIPSIS
        ServiceSettings(...)
    """

    log_level: str = "WARNING"
    dispatch_mode: DispatchMode = "sequential"
    max_message_bytes: int = CORE_MAX_MESSAGE_BYTES
    read_chunk_size: int = CORE_READ_CHUNK_SIZE
    error_detail: ErrorDetail = "summary"

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: ServiceSettings, cfg: dict[str, Any] | None) -> ServiceSettings:
        """Apply a loose config mapping onto ServiceSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        def _positive_int(v: Any) -> int | None:
            try:
                n = int(v)
            except (TypeError, ValueError):
                return None
            return n if n > 0 else None

        def _choice(v: Any, allowed: tuple[str, ...]) -> str | None:
            if isinstance(v, str):
                lo = v.strip().lower()
                if lo in allowed:
                    return lo
            return None

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            level = cfg["log_level"].strip().upper()
            if level in _LOG_LEVELS:
                s = replace(s, log_level=level)

        if "dispatch_mode" in cfg:
            mode = _choice(cfg["dispatch_mode"], ("sequential", "concurrent"))
            if mode is not None:
                s = replace(s, dispatch_mode=mode)  # type: ignore[arg-type]

        if "max_message_bytes" in cfg:
            n = _positive_int(cfg["max_message_bytes"])
            if n is not None:
                s = replace(s, max_message_bytes=n)

        if "read_chunk_size" in cfg:
            n = _positive_int(cfg["read_chunk_size"])
            if n is not None:
                s = replace(s, read_chunk_size=n)

        if "error_detail" in cfg:
            detail = _choice(cfg["error_detail"], ("summary", "traceback"))
            if detail is not None:
                s = replace(s, error_detail=detail)  # type: ignore[arg-type]

        return s

    @classmethod
    def from_env(
        cls, base: ServiceSettings | None = None, prefix: str = "MCODEC_"
    ) -> ServiceSettings:
        """
        Build ServiceSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - MCODEC_LOG_LEVEL
            - MCODEC_DISPATCH_MODE ("sequential" | "concurrent")
            - MCODEC_MAX_MESSAGE_BYTES
            - MCODEC_READ_CHUNK_SIZE
            - MCODEC_ERROR_DETAIL ("summary" | "traceback")
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for name in _FIELDS:
            v = os.getenv(prefix + name.upper())
            if v:
                mapping[name] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ServiceSettings:
        """
        Build ServiceSettings from a TOML file.

        Search order when `path` is None:
            1) ./mcodec.toml (with either a [service] table or top-level keys)
            2) ./pyproject.toml under [tool.mcodec.service]

        Returns defaults if no file is present or readable.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                logger.warning("ignoring unreadable config file %s: %s", p, exc)
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "mcodec.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: Any = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("mcodec", {}).get("service", {}) if isinstance(tool, dict) else None
            else:
                cfg = data["service"] if isinstance(data.get("service"), dict) else data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> ServiceSettings:
        """
        Load ServiceSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (mcodec.toml, pyproject.toml).

        Returns:
            ServiceSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
