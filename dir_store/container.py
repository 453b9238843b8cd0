"""Name-to-folder resolution for record containers."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from .errors import LocationError
from .log import store_log

_RESERVED_NAMES = frozenset({"", ".", ".."})


@dataclass(frozen=True)
class Container:
    """A folder addressed by a stable name under a parent folder."""

    name: str
    parent: Path

    @property
    def path(self) -> Path:
        return self.parent / self.name

    @classmethod
    def at(cls, folder: str | Path) -> Container:
        """Build a container for an existing absolute folder path."""
        p = Path(folder)
        return cls(name=p.name, parent=p.parent)


class ContainerResolver:
    """Resolve, create, and destroy record containers.

    Resolution is pure: the same ``(name, parent)`` always yields the same
    path.  ``ensure`` is create-if-needed and safe to call repeatedly.
    """

    def resolve(self, name: str, parent: str | Path) -> Container:
        if name in _RESERVED_NAMES or "/" in name or "\\" in name or "\0" in name:
            raise LocationError(f"Invalid container name: {name!r}")
        return Container(name=name, parent=Path(parent))

    def ensure(self, container: Container) -> Path:
        folder = container.path
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LocationError(f"Cannot create container {folder}: {exc}") from exc
        return folder

    def destroy(self, container: Container) -> bool:
        folder = container.path
        if not folder.exists():
            return False
        try:
            shutil.rmtree(folder)
        except OSError as exc:
            raise LocationError(f"Cannot remove container {folder}: {exc}") from exc
        store_log(f"Removed container {folder}")
        return True


# Stateless; shared by records that are not given a resolver explicitly.
default_resolver = ContainerResolver()
