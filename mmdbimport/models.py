# mmdbimport/models.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterator, List, Optional

from mmdbimport.config import DEFAULT_LANGUAGES
from mmdbimport.errors import ValidationError


@dataclass
class Metadata:
    database_type: str = ""
    description: dict[str, str] = field(default_factory=dict)
    languages: List[str] = field(default_factory=list)
    build_epoch: Optional[int] = None  # unix seconds; None -> "now" at build time

    def with_defaults(self, now: int) -> "Metadata":
        """Copy with languages/build_epoch filled in the way the builder expects."""
        return replace(
            self,
            languages=list(self.languages) or list(DEFAULT_LANGUAGES),
            build_epoch=now if self.build_epoch is None else self.build_epoch,
        )


@dataclass
class Record:
    network: str            # "a.b.c.d/len" or "x::/len"
    data: Any = None        # decoded JSON payload, normally a dict


@dataclass
class InputDocument:
    metadata: Metadata = field(default_factory=Metadata)
    records: List[Record] = field(default_factory=list)
    legacy: bool = False    # parsed from a bare array of records


class ValidationErrors:
    """Ordered, append-only sink used by the collect-all validators."""

    def __init__(self) -> None:
        self.errors: List[ValidationError] = []

    def add(self, field_path: str, message: str) -> None:
        self.errors.append(ValidationError(field_path, message))

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self.errors)

    def __repr__(self) -> str:
        return f"ValidationErrors({self.errors!r})"
