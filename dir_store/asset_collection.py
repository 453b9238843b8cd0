"""A sorted store of PermanentAssets belonging to one owner record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .asset_library import AssetLibrary
from .asset_record import PermanentAsset, TemporaryAsset
from .conf import ASSETS_FILE_NAME
from .errors import DirStoreError, InvalidDataError
from .log import store_log
from .record import Record
from .record_store import SortedRecordStore


@dataclass
class AssetCollection(SortedRecordStore[PermanentAsset]):
    """The assets of one owner, listed in ``<owner folder>/photos.json``.

    ``parent`` is the owner's folder; each asset file lives under its
    ``Photos`` subfolder.  Writes go through ``library`` so every new blob
    lands in the shared cache.
    """

    record_class: type[PermanentAsset] = field(default=PermanentAsset)
    library: AssetLibrary | None = None

    def __post_init__(self):
        super().__post_init__()
        if self.library is None:
            self.library = AssetLibrary()

    @classmethod
    def for_owner(
        cls,
        owner: Record,
        library: AssetLibrary | None = None,
        preview: bool = False,
    ) -> AssetCollection:
        owner_folder = owner.container.path
        return cls(
            storage_path=owner_folder / ASSETS_FILE_NAME,
            parent=owner_folder,
            preview=preview,
            library=library,
        )

    # -- New content --

    def append_new(self, data: bytes) -> PermanentAsset:
        """Write ``data`` as a new asset and append it."""
        return self.append_new_many([data])[0]

    def append_new_many(self, datas: Iterable[bytes]) -> list[PermanentAsset]:
        """Write each entry of ``datas`` as a new asset and append them in order."""
        assets = self._write_new(datas)
        self._store_new(assets, self.extend)
        return assets

    def insert_new(self, data: bytes) -> PermanentAsset:
        """Write ``data`` as a new asset and insert it in sort order."""
        assets = self._write_new([data])
        self._store_new(assets, self.insert_many)
        return assets[0]

    # -- Promotion --

    def promote_and_append(self, temporary: TemporaryAsset) -> PermanentAsset:
        return self.promote_and_append_many([temporary])[0]

    def promote_and_append_many(self, temporaries: Iterable[TemporaryAsset]) -> list[PermanentAsset]:
        return self._promote(list(temporaries), self.extend)

    def promote_and_insert(self, temporary: TemporaryAsset) -> PermanentAsset:
        return self._promote([temporary], self.insert_many)[0]

    # -- Reads --

    def blob(self, asset: PermanentAsset) -> Any | None:
        return self.library.read(asset)

    def first_blob(self) -> Any | None:
        """Blob of the first asset, or None when there are no assets."""
        if self.is_empty:
            return None
        return self.blob(self[0])

    # -- Removal --

    def delete_at(self, index: int) -> PermanentAsset:
        item = super().delete_at(index)
        self.library.cache.remove(item.id)
        return item

    # -- Internals --

    def _write_new(self, datas: Iterable[bytes]) -> list[PermanentAsset]:
        written: list[PermanentAsset] = []
        try:
            for data in datas:
                if not data:
                    raise InvalidDataError("Cannot add an asset with empty content")
                asset = self.library.create_permanent(self.parent)
                self.library.write(asset, data)
                written.append(asset)
        except DirStoreError:
            for asset in written:
                self.library.discard(asset)
            raise
        return written

    def _store_new(self, assets: list[PermanentAsset], add) -> None:
        try:
            add(assets)
        except DirStoreError:
            for asset in assets:
                self.library.discard(asset)
            raise

    def _promote(self, temporaries: list[TemporaryAsset], add) -> list[PermanentAsset]:
        promoted: list[tuple[PermanentAsset, TemporaryAsset]] = []
        try:
            for temporary in temporaries:
                promoted.append((self.library.promote(temporary, self.parent), temporary))
            add([permanent for permanent, _ in promoted])
        except DirStoreError:
            for permanent, temporary in reversed(promoted):
                try:
                    self.library.demote(permanent, temporary)
                except DirStoreError as exc:
                    store_log(f"Cannot roll back promotion of {temporary.id}: {exc}")
            store_log(f"Rolled back {len(promoted)} promotions into {self.parent}")
            raise
        assets = [permanent for permanent, _ in promoted]
        for asset in assets:
            self.library.read(asset)
        return assets


class AssetOwner:
    """Mixin for records that keep assets in their container."""

    def assets(self, library: AssetLibrary | None = None, preview: bool = False) -> AssetCollection:
        return AssetCollection.for_owner(self, library, preview=preview)
