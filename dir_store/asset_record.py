"""Records for binary assets stored as ``<container>/<id>`` files."""

from __future__ import annotations

from pathlib import Path

from pydantic import PrivateAttr

from .conf import ASSETS_FOLDER_NAME
from .container import Container
from .errors import LocationError
from .record import Record


class AssetRecord(Record):
    """One binary asset. The backing file is named by the asset id, no extension."""

    @property
    def file_name(self) -> str:
        return str(self.id)

    @property
    def file_path(self) -> Path:
        return self.container.path / self.file_name

    def will_discard(self) -> None:
        # Siblings share the container, so only this asset's file goes.
        try:
            self.file_path.unlink(missing_ok=True)
        except OSError as exc:
            raise LocationError(f"Cannot remove asset file {self.file_path}: {exc}") from exc


class TemporaryAsset(AssetRecord):
    """An asset created before its owner exists.

    ``parent`` is the shared temporary root and is itself the container.
    Once promoted the asset is spent and must not be used again.
    """

    _promoted: bool = PrivateAttr(default=False)

    @property
    def container(self) -> Container:
        if self.parent is None:
            raise LocationError(f"TemporaryAsset {self.id} has no temporary root")
        return Container.at(self.parent)

    @property
    def promoted(self) -> bool:
        return self._promoted


class PermanentAsset(AssetRecord):
    """An asset living in ``<owner folder>/Photos``; ``parent`` is the owner folder."""

    @property
    def folder_name(self) -> str:
        return ASSETS_FOLDER_NAME
