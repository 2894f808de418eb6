"""Probe adapters consumed by the suite runner."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Mapping, Protocol, Sequence, Union

import yaml

from .models import ProbeCategory, TestResult

ProbeOutput = Union[Sequence[TestResult], Awaitable[Sequence[TestResult]]]


class Tester(Protocol):
    """Capability implemented by every probe category."""

    name: str
    category: ProbeCategory

    def run(self) -> ProbeOutput:
        """Return the probe's results, directly or as an awaitable."""


@dataclass
class StaticProbe:
    """Probe returning a fixed list of results."""

    name: str
    results: Sequence[TestResult] = field(default_factory=tuple)
    category: ProbeCategory = ProbeCategory.OTHER

    def run(self) -> Sequence[TestResult]:
        return tuple(self.results)


@dataclass
class CallableProbe:
    """Probe delegating to a plain function or coroutine function."""

    name: str
    func: Callable[[], ProbeOutput]
    category: ProbeCategory = ProbeCategory.OTHER

    def run(self) -> ProbeOutput:
        return self.func()


def _load_structure(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _default_name(path: Path) -> str:
    return path.stem.replace("_", " ").replace("-", " ").title()


@dataclass
class RecordedProbe:
    """Replays results an external probe recorded to a YAML or JSON file.

    The document is a mapping with optional ``name`` and ``category`` keys and a
    ``results`` list, each entry accepted by :meth:`TestResult.from_dict`.
    """

    path: Path
    name: str = ""
    category: ProbeCategory = ProbeCategory.OTHER

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if not self.name:
            self.name = _default_name(self.path)

    @classmethod
    def from_file(cls, path: Path) -> "RecordedProbe":
        """Create a probe using the document header for its name and category.

        An unreadable header falls back to defaults; the read error then
        resurfaces from :meth:`run`, where the suite runner isolates it.
        """

        path = Path(path)
        try:
            document = _load_structure(path)
        except (OSError, ValueError, yaml.YAMLError):
            return cls(path=path)
        if not isinstance(document, Mapping):
            return cls(path=path)
        category = ProbeCategory.OTHER
        raw_category = document.get("category")
        if raw_category in {item.value for item in ProbeCategory}:
            category = ProbeCategory(raw_category)
        return cls(path=path, name=str(document.get("name") or ""), category=category)

    def run(self) -> Sequence[TestResult]:
        document = _load_structure(self.path)
        if not isinstance(document, Mapping):
            raise ValueError(f"Recorded results in {self.path} must be a mapping")
        entries = document.get("results")
        if not isinstance(entries, list):
            raise ValueError(f"Recorded results in {self.path} must contain a 'results' list")
        return tuple(TestResult.from_dict(entry) for entry in entries)


def load_recorded_probes(paths: Iterable[Path]) -> list[RecordedProbe]:
    """Build recorded probes for each file, expanding directories."""

    probes: list[RecordedProbe] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            candidates = sorted(
                item for item in path.iterdir() if item.suffix in {".json", ".yml", ".yaml"}
            )
        else:
            candidates = [path]
        probes.extend(RecordedProbe.from_file(candidate) for candidate in candidates)
    return probes


__all__ = [
    "CallableProbe",
    "ProbeOutput",
    "RecordedProbe",
    "StaticProbe",
    "Tester",
    "load_recorded_probes",
]
