"""Report formats and the reporters that write them.

Each format name (``xunit``, ``markdown``) is bound to one
:class:`~contractreport.reports.base.FileReporter` subclass. The class's
``default_path`` gives the file name used when a run does not name an output
path. Reporters shipped outside this package are addressed as
``"package.module:ClassName"``.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Any, TypeVar

from contractreport.reports.base import FileReporter


R = TypeVar("R", bound=type[FileReporter])


@dataclass(frozen=True, slots=True)
class ReportFormat:
    """A format name and the reporter class that produces it."""

    name: str
    reporter_class: type[FileReporter]

    @property
    def default_filename(self) -> str:
        return PurePath(self.reporter_class.default_path).name

    def output_path(self, requested: str | Path | None) -> Path:
        """Absolute path a reporter of this format would write to."""
        return self.reporter_class.sanitized_path(requested)


_formats: dict[str, ReportFormat] = {}


def register_format(name: str) -> Callable[[R], R]:
    """Class decorator binding ``name`` to a reporter class.

    Re-registering the same class is a no-op; claiming a name that another
    class already writes raises :class:`ValueError`.
    """

    def decorator(cls: R) -> R:
        existing = _formats.get(name)
        if existing is not None and existing.reporter_class is not cls:
            msg = f"Report format {name!r} is already written by {existing.reporter_class.__name__}"
            raise ValueError(msg)
        _formats[name] = ReportFormat(name, cls)
        return cls

    return decorator


def unregister_format(name: str) -> None:
    _formats.pop(name, None)


def available_formats() -> list[str]:
    return sorted(_formats)


def _import_format(import_path: str) -> ReportFormat:
    module_path, _, class_name = import_path.partition(":")
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name, None)
    if not isinstance(cls, type) or not issubclass(cls, FileReporter):
        msg = f"{import_path} is not a FileReporter subclass"
        raise TypeError(msg)
    return ReportFormat(import_path, cls)


def find_format(name: str) -> ReportFormat:
    """Look up a registered format, or import ``module:Class``.

    Raises:
        ValueError: ``name`` is neither registered nor an import string.
        TypeError: The imported object is not a reporter class.
        ImportError: The module of an import string cannot be imported.
    """
    if name in _formats:
        return _formats[name]
    if ":" in name:
        return _import_format(name)

    msg = f"Unknown report format: {name}. Available: {', '.join(available_formats())}"
    raise ValueError(msg)


def build_reporters(
    requests: Sequence[tuple[str, dict[str, Any]]],
    **common: Any,
) -> list[FileReporter]:
    """Create one reporter per ``(format, kwargs)`` request, in order.

    Every request is checked before any reporter is constructed, so a
    rejected run leaves existing report files untouched.

    Args:
        requests: Format name or import string, with its constructor kwargs.
        **common: Kwargs shared by every reporter, such as the ``emitter``.

    Raises:
        ValueError: Two requests would write the same file, or a format is unknown.
    """
    planned: list[tuple[ReportFormat, dict[str, Any]]] = []
    owners: dict[Path, str] = {}
    for name, kwargs in requests:
        report_format = find_format(name)
        target = report_format.output_path(kwargs.get("output_path"))
        if target in owners:
            msg = f"{target} is claimed by both {owners[target]!r} and {name!r}"
            raise ValueError(msg)
        owners[target] = name
        planned.append((report_format, kwargs))

    return [fmt.reporter_class(**{**common, **kwargs}) for fmt, kwargs in planned]


__all__ = [
    "ReportFormat",
    "available_formats",
    "build_reporters",
    "find_format",
    "register_format",
    "unregister_format",
]
