"""
Configuration loading.

Two kinds of configuration are read from a single YAML document:

* the **ruleset** – skills vocabulary, recognized titles, the title
  adjacency table, degree patterns and scoring knobs.  Everything that
  can change a score lives here, and the ruleset's `version` is a hash
  of that content so a ranked batch records which rules produced it.
* the **runtime settings** – concurrency, batch size limits, the store
  directory and logging.

The packaged `config.yaml` provides defaults.  Environment variables
(optionally from a `.env` file) override the config path and the most
common runtime settings.  A ruleset is loaded once and only replaced by
an explicit reload; it is never hot-reloaded under a running batch.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .normalize.schema import EducationLevel

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().with_name("config.yaml")

UNKNOWN_EXPERIENCE_POLICIES = ("neutral", "penalize")


@dataclass(frozen=True)
class Ruleset:
    """Scoring rules applied consistently across one ranking pass."""

    skills: Dict[str, List[str]]
    titles: Dict[str, List[str]]
    title_adjacency: Dict[str, List[str]] = field(default_factory=dict)
    degrees: Dict[str, List[str]] = field(default_factory=dict)
    min_text_length: int = 50
    unknown_experience: str = "neutral"
    highly_recommended_threshold: int = 85
    recommended_threshold: int = 70

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skills": self.skills,
            "titles": self.titles,
            "title_adjacency": self.title_adjacency,
            "degrees": self.degrees,
            "scoring": {
                "min_text_length": self.min_text_length,
                "unknown_experience": self.unknown_experience,
                "highly_recommended_threshold": self.highly_recommended_threshold,
                "recommended_threshold": self.recommended_threshold,
            },
        }

    @property
    def version(self) -> str:
        """Short content hash identifying this exact set of rules."""
        payload = json.dumps(self.to_dict(), sort_keys=True).encode("utf-8")
        return hashlib.sha1(payload).hexdigest()[:12]


@dataclass
class Settings:
    """Runtime settings that never influence a score."""

    max_concurrency: int = 4
    max_candidates: int = 100
    store_dir: str = ".cvrank"
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _string_table(raw: Any, section: str) -> Dict[str, List[str]]:
    """Validate a mapping of canonical name to a list of variants.

    The canonical name is always included among its own variants.
    """
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigError(f"'{section}' must be a mapping of name to variants")
    table: Dict[str, List[str]] = {}
    for name, variants in raw.items():
        if variants is None:
            variants = []
        if not isinstance(variants, list) or not all(isinstance(v, str) for v in variants):
            raise ConfigError(f"'{section}.{name}' must be a list of strings")
        canonical = str(name).strip()
        if not canonical:
            raise ConfigError(f"'{section}' contains an empty name")
        merged = [canonical] + [v.strip() for v in variants if v.strip()]
        table[canonical] = list(dict.fromkeys(merged))
    return table


def build_ruleset(data: Mapping[str, Any]) -> Ruleset:
    """Build and validate a `Ruleset` from a parsed YAML document."""
    skills = _string_table(data.get("skills"), "skills")
    if not skills:
        raise ConfigError("'skills' vocabulary must not be empty")
    titles = _string_table(data.get("titles"), "titles")

    adjacency_raw = data.get("title_adjacency") or {}
    if not isinstance(adjacency_raw, Mapping):
        raise ConfigError("'title_adjacency' must be a mapping of title to adjacent titles")
    adjacency: Dict[str, List[str]] = {}
    for required, adjacent in adjacency_raw.items():
        if required not in titles:
            raise ConfigError(f"'title_adjacency' refers to unknown title {required!r}")
        adjacent = adjacent or []
        if not isinstance(adjacent, list) or not all(isinstance(t, str) for t in adjacent):
            raise ConfigError(f"'title_adjacency.{required}' must be a list of strings")
        unknown = [t for t in adjacent if t not in titles]
        if unknown:
            raise ConfigError(f"'title_adjacency.{required}' refers to unknown titles {unknown}")
        adjacency[required] = list(adjacent)

    degrees_raw = data.get("degrees") or {}
    if not isinstance(degrees_raw, Mapping):
        raise ConfigError("'degrees' must be a mapping of education level to patterns")
    degrees: Dict[str, List[str]] = {}
    for level, patterns in degrees_raw.items():
        try:
            parsed = EducationLevel.from_name(level)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        if parsed is EducationLevel.NONE:
            raise ConfigError("'degrees' cannot define patterns for level 'none'")
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ConfigError(f"'degrees.{level}' must be a list of strings")
        degrees[parsed.value] = list(patterns)

    scoring = data.get("scoring") or {}
    try:
        min_text_length = int(scoring.get("min_text_length", 50))
        highly = int(scoring.get("highly_recommended_threshold", 85))
        recommended = int(scoring.get("recommended_threshold", 70))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid scoring setting: {exc}") from exc
    unknown_experience = str(scoring.get("unknown_experience", "neutral")).lower()
    if unknown_experience not in UNKNOWN_EXPERIENCE_POLICIES:
        raise ConfigError(
            f"'scoring.unknown_experience' must be one of {UNKNOWN_EXPERIENCE_POLICIES}"
        )
    if min_text_length < 1:
        raise ConfigError("'scoring.min_text_length' must be positive")
    if not 0 <= recommended <= highly <= 100:
        raise ConfigError("score thresholds must satisfy 0 <= recommended <= highly_recommended <= 100")

    return Ruleset(
        skills=skills,
        titles=titles,
        title_adjacency=adjacency,
        degrees=degrees,
        min_text_length=min_text_length,
        unknown_experience=unknown_experience,
        highly_recommended_threshold=highly,
        recommended_threshold=recommended,
    )


def build_settings(data: Mapping[str, Any]) -> Settings:
    """Build runtime settings from YAML, then apply environment overrides."""
    runtime = data.get("runtime") or {}
    log_cfg = data.get("logging") or {}
    try:
        settings = Settings(
            max_concurrency=int(runtime.get("max_concurrency", 4)),
            max_candidates=int(runtime.get("max_candidates", 100)),
            store_dir=str(runtime.get("store_dir", ".cvrank")),
            log_level=str(log_cfg.get("level", "INFO")).upper(),
            log_file=log_cfg.get("file"),
        )
        if os.getenv("CVRANK_MAX_CONCURRENCY"):
            settings.max_concurrency = int(os.environ["CVRANK_MAX_CONCURRENCY"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid runtime setting: {exc}") from exc
    if os.getenv("CVRANK_STORE_DIR"):
        settings.store_dir = os.environ["CVRANK_STORE_DIR"]
    if os.getenv("CVRANK_LOG_LEVEL"):
        settings.log_level = os.environ["CVRANK_LOG_LEVEL"].upper()
    if settings.max_concurrency < 1:
        raise ConfigError("'runtime.max_concurrency' must be at least 1")
    if settings.max_candidates < 1:
        raise ConfigError("'runtime.max_candidates' must be at least 1")
    return settings


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return data


def resolve_config_path(config_path: Optional[str] = None) -> Path:
    """Pick the config file: explicit argument, then `CVRANK_CONFIG`, then the packaged default."""
    load_dotenv()
    chosen = config_path or os.getenv("CVRANK_CONFIG")
    return Path(chosen) if chosen else DEFAULT_CONFIG_PATH


def load_ruleset(config_path: Optional[str] = None) -> Ruleset:
    path = resolve_config_path(config_path)
    ruleset = build_ruleset(_read_yaml(path))
    logger.info(
        "Loaded ruleset %s from %s (%d skills, %d titles)",
        ruleset.version,
        path,
        len(ruleset.skills),
        len(ruleset.titles),
    )
    return ruleset


def load_config(config_path: Optional[str] = None) -> Tuple[Ruleset, Settings]:
    """Load both the ruleset and the runtime settings from one YAML file.

    Args:
        config_path: Optional path to a YAML file.  Defaults to the
            `CVRANK_CONFIG` environment variable, then the packaged
            `config.yaml`.

    Returns:
        A `(ruleset, settings)` tuple.

    Raises:
        ConfigError: If the file cannot be read or fails validation.
    """
    path = resolve_config_path(config_path)
    data = _read_yaml(path)
    ruleset = build_ruleset(data)
    settings = build_settings(data)
    logger.debug("Loaded config %s (ruleset %s)", path, ruleset.version)
    return ruleset, settings
