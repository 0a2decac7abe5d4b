"""
Configuration for optwire projections.

Defines ProjectionSettings, a frozen dataclass carrying runtime configuration for how the
projection engine surfaces advisories and logs payload keys. The engine itself never reads
the environment or files; callers load settings once and pass them to `project`.

Source of truth
- optwire.core.constants.ENV_PREFIX and CONFIG_FILENAME name the env prefix and TOML file.

Import DAG discipline
- Depends only on stdlib, python-dotenv, and optwire.core.constants / optwire.core.errors.

Notes
- Precedence for `load()`: environment > TOML > defaults.
- Loose values from env/TOML that cannot be interpreted are ignored (with a log line) and
  the previous value is kept; explicit constructor arguments are validated strictly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

import tomllib
from dotenv import load_dotenv

from optwire.core.constants import CONFIG_FILENAME, ENV_PREFIX
from optwire.core.errors import ConfigError

__all__ = [
    "AdvisoryMode",
    "ProjectionSettings",
]

logger = logging.getLogger(__name__)

AdvisoryMode = Literal["warn", "log", "ignore"]
_ADVISORY_MODES: frozenset[str] = frozenset({"warn", "log", "ignore"})


def _bool(v: Any) -> bool | None:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        lo = v.strip().lower()
        if lo in {"1", "true", "t", "yes", "y", "on"}:
            return True
        if lo in {"0", "false", "f", "no", "n", "off"}:
            return False
    return None


@dataclass(frozen=True)
class ProjectionSettings:
    """
    Runtime settings for the projection engine.

    Attributes:
        advisory_mode (Literal["warn","log","ignore"]): How deprecated-field advisories are
            surfaced: `warnings.warn` with DeprecatedFieldAdvisory, a WARNING log record, or
            not at all.
        log_payload_keys (bool): Log the emitted wire keys at DEBUG after each projection.

    Raises:
        ConfigError: If advisory_mode is not one of the allowed values.

    Examples:
        >>> from optwire.config import ProjectionSettings
        >>> ProjectionSettings(advisory_mode="log")
        ProjectionSettings(advisory_mode='log', log_payload_keys=False)
    """

    advisory_mode: AdvisoryMode = "warn"
    log_payload_keys: bool = False

    def __post_init__(self) -> None:
        if self.advisory_mode not in _ADVISORY_MODES:
            raise ConfigError(
                f"advisory_mode must be one of {sorted(_ADVISORY_MODES)}, got {self.advisory_mode!r}"
            )
        if not isinstance(self.log_payload_keys, bool):
            raise ConfigError(f"log_payload_keys must be a bool, got {self.log_payload_keys!r}")

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: ProjectionSettings, cfg: dict[str, Any] | None) -> ProjectionSettings:
        """Apply a loose config mapping onto ProjectionSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "advisory_mode" in cfg:
            mode = cfg["advisory_mode"]
            if isinstance(mode, str) and mode.strip().lower() in _ADVISORY_MODES:
                s = replace(s, advisory_mode=mode.strip().lower())  # type: ignore[arg-type]
            else:
                logger.warning("ignoring unsupported advisory_mode %r", mode)

        if "log_payload_keys" in cfg:
            flag = _bool(cfg["log_payload_keys"])
            if flag is None:
                logger.warning("ignoring unsupported log_payload_keys %r", cfg["log_payload_keys"])
            else:
                s = replace(s, log_payload_keys=flag)

        return s

    @classmethod
    def from_env(
        cls, base: ProjectionSettings | None = None, prefix: str = ENV_PREFIX
    ) -> ProjectionSettings:
        """
        Build ProjectionSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - OPTWIRE_ADVISORY_MODE ("warn" | "log" | "ignore")
            - OPTWIRE_LOG_PAYLOAD_KEYS (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        v = os.getenv(prefix + "ADVISORY_MODE")
        if v:
            mapping["advisory_mode"] = v
        v = os.getenv(prefix + "LOG_PAYLOAD_KEYS")
        if v:
            mapping["log_payload_keys"] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ProjectionSettings:
        """
        Build ProjectionSettings from a TOML file.

        Search order when `path` is None:
            1) ./optwire.toml (with either a [projection] table or direct keys)
            2) ./pyproject.toml under [tool.optwire.projection]

        Returns defaults if no file is present.

        Raises:
            ConfigError: If an explicitly given file cannot be parsed.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / CONFIG_FILENAME)
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                if path is not None:
                    raise ConfigError(f"cannot parse {p}: {exc}") from exc
                logger.warning("skipping unreadable config %s: %s", p, exc)
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                section = tool.get("optwire", {}) if isinstance(tool, dict) else {}
                cfg = section.get("projection") if isinstance(section, dict) else None
            elif isinstance(data.get("projection"), dict):
                cfg = data["projection"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(
        cls, path: str | os.PathLike[str] | None = None, *, dotenv: bool = False
    ) -> ProjectionSettings:
        """
        Load ProjectionSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (optwire.toml, pyproject.toml).
            dotenv: Read ./.env into the environment first (existing variables win).

        Returns:
            ProjectionSettings
        """
        if dotenv:
            load_dotenv(Path.cwd() / ".env", override=False)
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
