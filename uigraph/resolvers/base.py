"""Shared pieces of the module resolution strategies."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Sequence

EXTERNAL_DIR = "node_modules"


class ResolverStrategy(ABC):
    """One step of the resolution chain. Implementations return ``None`` on a miss."""

    name = "strategy"

    @abstractmethod
    def resolve(self, specifier: str, from_file: Path) -> Optional[Path]:
        """Map ``specifier`` imported from ``from_file`` to a file, if possible."""


def is_external_location(path: Path) -> bool:
    return EXTERNAL_DIR in path.parts


def join_specifier(directory: Path, specifier: str) -> Path:
    """Join a relative specifier onto ``directory``, collapsing ``.`` and ``..``."""
    return Path(os.path.normpath(directory / specifier))


def is_directory_specifier(specifier: str) -> bool:
    return specifier.endswith("/") or specifier in {".", ".."}


def probe_extensions(base: Path, extensions: Iterable[str]) -> Optional[Path]:
    for extension in extensions:
        candidate = base.with_name(base.name + extension)
        if candidate.is_file():
            return candidate
    return None


def probe_index(directory: Path, extensions: Iterable[str]) -> Optional[Path]:
    for extension in extensions:
        candidate = directory / f"index{extension}"
        if candidate.is_file():
            return candidate
    return None


def probe_module(base: Path, extensions: Sequence[str], *, directory_only: bool = False) -> Optional[Path]:
    """Try ``base`` with each extension, then ``base/index`` with each extension."""
    if not directory_only:
        found = probe_extensions(base, extensions)
        if found is not None:
            return found
    return probe_index(base, extensions)


def find_project_root(from_file: Path, markers: Sequence[str]) -> Optional[Path]:
    """Walk upward from ``from_file`` to the first directory holding a marker file."""
    directory = from_file.parent
    while True:
        if any((directory / marker).exists() for marker in markers):
            return directory
        if directory.parent == directory:
            return None
        directory = directory.parent


__all__ = [
    "EXTERNAL_DIR",
    "ResolverStrategy",
    "find_project_root",
    "is_directory_specifier",
    "is_external_location",
    "join_specifier",
    "probe_extensions",
    "probe_index",
    "probe_module",
]
