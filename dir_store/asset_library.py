"""Asset lifecycle: create, write, read, promote, and discard asset files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from .asset_cache import AssetCache, Duration, Expiry
from .asset_record import AssetRecord, PermanentAsset, TemporaryAsset
from .atomic_io import atomic_write_bytes, move_file
from .conf import TEMP_ASSETS_ROOT
from .container import ContainerResolver, default_resolver
from .errors import AssetConsumedError, InvalidDataError, LocationError, WriteError
from .log import store_log
from .record import Record

Decoder = Callable[[bytes], Any]


def passthrough_decoder(data: bytes) -> bytes | None:
    """Treat the raw bytes as the blob. Empty content decodes to nothing."""
    return data or None


class AssetLibrary:
    """Reads and writes asset files, shadowed by an ``AssetCache``.

    One library (and so one cache) is meant to be built at startup and
    handed to every collection that needs it.  ``decoder`` turns file bytes
    into the blob that gets cached and returned; it returns None (or
    raises) for content it cannot decode.
    """

    def __init__(
        self,
        cache: AssetCache | None = None,
        decoder: Decoder = passthrough_decoder,
        temp_root: str | Path | None = None,
        expiry: Duration = Expiry.SHORT,
        resolver: ContainerResolver | None = None,
    ) -> None:
        self.cache = cache if cache is not None else AssetCache()
        self.decoder = decoder
        self.temp_root = Path(temp_root) if temp_root is not None else TEMP_ASSETS_ROOT
        self.expiry = expiry
        self.resolver = resolver or default_resolver

    # -- Allocation --

    def create_temporary(self) -> TemporaryAsset:
        """A fresh asset under the temporary root, not yet written."""
        return TemporaryAsset().bind(self.temp_root)

    def create_permanent(self, owner: Record | str | Path) -> PermanentAsset:
        """A fresh asset in the owner's assets folder, not yet written."""
        return PermanentAsset().bind(self._owner_folder(owner))

    # -- I/O --

    def write(self, asset: AssetRecord, data: bytes) -> None:
        """Write ``data`` as the asset's content and cache the decoded blob.

        Empty ``data`` means "no asset": any existing file is removed.
        """
        self._check_usable(asset)
        if not data:
            self.discard(asset)
            store_log(f"Empty write for asset {asset.id}, removed backing file")
            return
        blob = self._decode(data)
        if blob is None:
            raise InvalidDataError(f"Content for asset {asset.id} cannot be decoded")
        folder = self.resolver.ensure(asset.container)
        target = folder / asset.file_name
        try:
            atomic_write_bytes(target, data)
        except OSError as exc:
            raise WriteError(f"Cannot write asset file {target}: {exc}") from exc
        self.cache.put(asset.id, blob, self.expiry)

    def read(self, asset: AssetRecord) -> Any | None:
        """Return the asset's blob, from the cache when possible.

        A missing, unreadable, or undecodable file reads as None.
        """
        self._check_usable(asset)
        blob = self.cache.get(asset.id)
        if blob is not None:
            return blob
        try:
            data = asset.file_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            store_log(f"Cannot read asset file {asset.file_path}: {exc}")
            return None
        blob = self._decode(data)
        if blob is None:
            return None
        self.cache.put(asset.id, blob, self.expiry)
        return blob

    def discard(self, asset: AssetRecord) -> None:
        """Remove the asset's backing file and cache entry."""
        asset.will_discard()
        self.cache.remove(asset.id)

    # -- Promotion --

    def promote(self, temporary: TemporaryAsset, owner: Record | str | Path) -> PermanentAsset:
        """Move a temporary asset into ``owner``'s assets folder.

        The permanent asset keeps the id and ``created_at`` of the temporary
        one, and the temporary asset is spent afterwards.
        """
        self._check_usable(temporary)
        source = temporary.file_path
        if not source.is_file():
            raise LocationError(f"Temporary asset {temporary.id} has no file at {source}")
        permanent = PermanentAsset(id=temporary.id, created_at=temporary.created_at)
        permanent.bind(self._owner_folder(owner))
        folder = self.resolver.ensure(permanent.container)
        try:
            move_file(source, folder / permanent.file_name)
        except OSError as exc:
            raise LocationError(f"Cannot move {source} to {folder}: {exc}") from exc
        temporary._promoted = True
        store_log(f"Promoted asset {temporary.id} to {folder}")
        return permanent

    def demote(self, permanent: PermanentAsset, temporary: TemporaryAsset) -> None:
        """Undo ``promote``: move the file back and make ``temporary`` usable again."""
        if permanent.id != temporary.id:
            raise ValueError(f"Asset {permanent.id} was not promoted from {temporary.id}")
        folder = self.resolver.ensure(temporary.container)
        try:
            move_file(permanent.file_path, folder / temporary.file_name)
        except OSError as exc:
            raise LocationError(f"Cannot move {permanent.file_path} back to {folder}: {exc}") from exc
        temporary._promoted = False
        store_log(f"Returned asset {temporary.id} to {folder}")

    # -- Internals --

    def _decode(self, data: bytes) -> Any | None:
        try:
            return self.decoder(data)
        except Exception as exc:
            store_log(f"Asset decode failed: {exc}")
            return None

    def _owner_folder(self, owner: Record | str | Path) -> Path:
        if isinstance(owner, Record):
            return owner.folder
        return Path(owner)

    @staticmethod
    def _check_usable(asset: AssetRecord) -> None:
        if isinstance(asset, TemporaryAsset) and asset.promoted:
            raise AssetConsumedError(f"Temporary asset {asset.id} was already promoted")
