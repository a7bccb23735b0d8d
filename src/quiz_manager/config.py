"""Configuration loader for the quiz shell."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from quiz_manager.core import workspace as workspace_mod
from quiz_manager.core.logging import LEVELS

CONFIG_FILENAME = "quiz_manager.toml"
CONFIG_ENV = "QUIZ_MANAGER_CONFIG"
ENV_PREFIX = "QUIZ_MANAGER_"
DATABASE_FILENAME = "quizzes.sqlite"

_DEFAULT_PROMPT = "quiz > "
_DEFAULT_LOG_LEVEL = "INFO"


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved settings for one shell run."""

    database: Path
    seed: bool
    prompt: str
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced values applied on top of env and file options."""

    database: Optional[Path] = None
    seed: Optional[bool] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults.

    A missing file at the default location is fine; a missing file that was
    asked for explicitly (``--config`` or ``QUIZ_MANAGER_CONFIG``) is not.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        _apply_file(table, _read_toml(requested))
        loaded_path = requested
    elif config_path is not None or _parse_env_string(env_map, "CONFIG"):
        raise QuizConfigError(f"Config file not found: {requested}")

    database = _resolve_database(
        _pick_first(
            overrides.database,
            _parse_env_path(env_map, "DATABASE"),
            _coerce_optional_path(table["storage"]["database"]),
        ),
        layout=layout,
    )
    seed = _require_bool(
        _pick_first(overrides.seed, table["storage"]["seed"]),
        field="storage.seed",
    )
    prompt = table["shell"]["prompt"]
    if not isinstance(prompt, str) or not prompt.strip():
        raise QuizConfigError("shell.prompt must be a non-empty string.")
    log_level = _resolve_log_level(
        _pick_first(
            overrides.log_level,
            _parse_env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        )
    )
    verbose = _require_bool(
        _pick_first(overrides.verbose, table["logging"]["verbose"]),
        field="logging.verbose",
    )

    config = QuizConfig(
        database=database,
        seed=seed,
        prompt=prompt,
        log_level=log_level,
        verbose=verbose,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "storage": {"database": None, "seed": True},
        "shell": {"prompt": _DEFAULT_PROMPT},
        "logging": {"level": _DEFAULT_LOG_LEVEL, "verbose": False},
    }


def config_template() -> str:
    """Return the TOML template written by ``quiz init-config``."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_config_template(path: Path, *, force: bool = False) -> Path:
    """Write the commented template to ``path``.

    An existing file is kept unless ``force`` is set. The file is made
    owner-only where the filesystem allows it.
    """

    if path.exists() and not force:
        raise QuizConfigError(f"Config already exists: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config_template(), encoding="utf-8")
    except OSError as exc:
        raise QuizConfigError(f"Unable to write config: {exc}") from exc
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def _read_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise QuizConfigError(
            f"Failed to parse config TOML: {exc}"
        ) from exc
    except OSError as exc:
        raise QuizConfigError(
            f"Unable to read config {path}: {exc}"
        ) from exc


def _apply_file(
    table: MutableMapping[str, MutableMapping[str, object]],
    parsed: Mapping[str, Any],
) -> None:
    """Copy the parsed ``[storage]``, ``[shell]`` and ``[logging]`` values.

    Values land in ``table`` in place.

    Every section must be a table and every key must be one the shell
    knows; value types are checked later, once all sources are combined.
    """

    for section, values in parsed.items():
        known = table.get(section)
        if known is None:
            raise QuizConfigError(f"Unknown configuration key '{section}'.")
        if not isinstance(values, Mapping):
            raise QuizConfigError(
                "Expected table for '{0}', found {1}.".format(
                    section, type(values).__name__
                )
            )
        for key, value in values.items():
            if key not in known:
                raise QuizConfigError(
                    f"Unknown configuration key '{section}.{key}'."
                )
            known[key] = value


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _parse_env_string(env_map, "CONFIG")
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_database(
    candidate: object, *, layout: workspace_mod.WorkspaceLayout
) -> Path:
    if candidate is None:
        return layout.path_for("data") / DATABASE_FILENAME
    if not isinstance(candidate, Path):
        raise QuizConfigError(
            f"database must be a path, found {type(candidate).__name__}."
        )
    if not candidate.is_absolute():
        return (layout.home / candidate).resolve()
    return candidate


def _resolve_log_level(candidate: object) -> str:
    if not isinstance(candidate, str) or not candidate.strip():
        raise QuizConfigError("logging.level must be a non-empty string.")
    level = candidate.strip().upper()
    if level not in LEVELS:
        raise QuizConfigError(
            "logging.level must be one of {0}.".format(", ".join(LEVELS))
        )
    return level


def _require_bool(value: object, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise QuizConfigError(f"'{field}' must be a boolean.")
    return value


def _coerce_optional_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        return Path(raw).expanduser() if raw else None
    raise QuizConfigError("storage.database must be a string when provided.")


def _parse_env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw).expanduser()


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    return raw.strip() or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


_CONFIG_TEMPLATE = """
# Quiz manager configuration

[storage]
# SQLite file holding the quizzes (defaults to <workspace>/data/quizzes.sqlite)
# database = "~/quizzes.sqlite"
# Insert the sample capital-city quizzes when the database is empty
seed = true

[shell]
prompt = "quiz > "

[logging]
level = "INFO"
# Mirror log records to stderr
verbose = false
"""
