from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Literal, Optional

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Diagnostic:
    """A validation or API message, optionally attached to one attribute of a resource."""

    severity: Severity
    summary: str
    detail: str = ""
    attribute_path: Optional[str] = None

    def __str__(self) -> str:
        where = f" [{self.attribute_path}]" if self.attribute_path else ""
        text = f"{self.severity.upper()}{where}: {self.summary}"
        if self.detail:
            text += f": {self.detail}"
        return text


@dataclass
class Diagnostics:
    """Ordered collection of diagnostics returned by validators, handlers and the host."""

    items: List[Diagnostic] = field(default_factory=list)

    def add_error(self, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic("error", summary, detail))

    def add_warning(self, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic("warning", summary, detail))

    def add_attribute_error(self, path: str, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic("error", summary, detail, attribute_path=path))

    def add_attribute_warning(self, path: str, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic("warning", summary, detail, attribute_path=path))

    def append(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)

    def extend(self, other: Iterable[Diagnostic]) -> None:
        self.items.extend(other)

    def has_error(self) -> bool:
        return any(d.severity == "error" for d in self.items)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.items if d.severity == "error"]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.items if d.severity == "warning"]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
