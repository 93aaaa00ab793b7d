# mmdbimport/errors.py

from __future__ import annotations


class MmdbImportError(Exception):
    """Base class for every error raised by mmdbimport."""


class ValidationError(MmdbImportError):
    """A single structural violation, addressed by a dotted/bracketed field path."""

    def __init__(self, field: str, message: str):
        super().__init__(field, message)
        self.field = field
        self.message = message

    def __str__(self) -> str:
        return f"validation error for {self.field}: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.field, self.message) == (other.field, other.message)

    def __hash__(self) -> int:
        return hash((self.field, self.message))


class InputParseError(MmdbImportError):
    """The input file could not be read or is not JSON in a supported shape."""


class ConversionError(MmdbImportError):
    """A value could not be mapped onto the MMDB typed-value model."""


class BuildError(MmdbImportError):
    """Builder construction, insertion or writing failed."""


class VerifyError(MmdbImportError):
    """An existing database could not be opened or decoded."""
