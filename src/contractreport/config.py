"""Project configuration from ``[tool.contractreport]`` in pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from contractreport.errors import ConfigError


class ReportConfig(BaseModel):
    """Settings shared by every reporter of a run.

    Attributes
    ----------
    reporters
        Registry names or import strings of the reporters to run.
    output_dir
        Directory for reporters without an explicit output path.
    details
        Render request/response detail for passing tests.
    reporter_options
        Extra constructor kwargs keyed by reporter name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    reporters: list[str] = Field(default_factory=lambda: ["xunit"])
    output_dir: Path = Path(".")
    details: bool = False
    reporter_options: dict[str, dict[str, Any]] = Field(default_factory=dict)


DEFAULT_CONFIG = ReportConfig()


def find_pyproject(start: Path | None = None) -> Path | None:
    """Return the nearest pyproject.toml at or above ``start``."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> ReportConfig:
    """Load configuration, falling back to :data:`DEFAULT_CONFIG`.

    Relative ``output_dir`` values are resolved against the directory that
    holds pyproject.toml.
    """
    pyproject = find_pyproject(start)
    if pyproject is None:
        return DEFAULT_CONFIG

    try:
        with pyproject.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Cannot parse {pyproject}: {exc}"
        raise ConfigError(msg) from exc

    section = data.get("tool", {}).get("contractreport")
    if section is None:
        return DEFAULT_CONFIG

    try:
        config = ReportConfig.model_validate(section)
    except ValidationError as exc:
        msg = f"Invalid [tool.contractreport] in {pyproject}:\n{exc}"
        raise ConfigError(msg) from exc

    if not config.output_dir.is_absolute():
        config = config.model_copy(update={"output_dir": pyproject.parent / config.output_dir})
    return config
