from __future__ import annotations

from pathlib import Path
from typing import Iterable


class ImageRandoError(Exception):
    """Base class for every failure the tool reports to the user."""


class InvalidConfig(ImageRandoError):
    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {field}={value!r}: {reason}")


class SourceUnreadable(ImageRandoError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read source {path}: {reason}")


class EmptySource(ImageRandoError):
    def __init__(self, path: Path, extensions: Iterable[str]) -> None:
        self.path = path
        self.extensions = tuple(extensions)
        accepted = ", ".join(f".{ext}" for ext in self.extensions)
        super().__init__(f"no {accepted} files found in source folder: {path}")


class MaterializeError(ImageRandoError):
    """Raised while creating the numbered folders or copying into them."""


class DestinationNotEmpty(MaterializeError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"destination folder is not empty: {path}\n"
            "Refusing to run to avoid mixing old/new output."
        )


class CopyFailed(MaterializeError):
    def __init__(self, source: Path | None, destination: Path, reason: str) -> None:
        self.source = source
        self.destination = destination
        self.reason = reason
        if source is None:
            message = f"cannot prepare {destination}: {reason}"
        else:
            message = f"failed to copy {source} -> {destination}: {reason}"
        super().__init__(message)
