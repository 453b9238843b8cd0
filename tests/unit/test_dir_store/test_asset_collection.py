"""Tests for AssetCollection – owner-scoped assets backed by photos.json."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from dir_store import (
    AssetCache,
    AssetCollection,
    AssetLibrary,
    AssetOwner,
    InvalidDataError,
    LocationError,
    PermanentAsset,
    Record,
    TemporaryAsset,
    WriteError,
)


class Property(AssetOwner, Record):
    """Owner record; its container is named after the address."""
    address: str = ""

    @property
    def folder_name(self) -> str:
        return self.address


T0 = datetime(2022, 7, 24, tzinfo=timezone.utc)


@pytest.fixture
def temp_root(tmp_path):
    return tmp_path / "tmp"


@pytest.fixture
def library(temp_root):
    return AssetLibrary(cache=AssetCache(), temp_root=temp_root)


@pytest.fixture
def owner(tmp_path):
    return Property(address="72 Heol Llinos").bind(tmp_path / "properties")


@pytest.fixture
def photos(owner, library):
    return owner.assets(library)


def _temp(library, data: bytes, minutes: int) -> TemporaryAsset:
    temp = TemporaryAsset(created_at=T0 + timedelta(minutes=minutes)).bind(library.temp_root)
    library.write(temp, data)
    return temp


def _failing_save():
    raise WriteError("disk full")


class TestLayout:
    def test_store_file_lives_in_owner_folder(self, photos, owner):
        assert photos.storage_path == owner.folder / "photos.json"
        assert photos.parent == owner.folder
        assert photos.record_class is PermanentAsset

    def test_for_owner_matches_mixin(self, owner, library):
        direct = AssetCollection.for_owner(owner, library)
        assert direct.storage_path == owner.assets(library).storage_path


class TestAppendNew:
    def test_append_new_writes_and_persists(self, photos, owner, library):
        asset = photos.append_new(b"cat.png bytes")
        assert asset.file_name == str(asset.id)
        assert (owner.folder / "Photos" / asset.file_name).read_bytes() == b"cat.png bytes"
        data = json.loads((owner.folder / "photos.json").read_text(encoding="utf-8"))
        assert [d["id"] for d in data] == [str(asset.id)]
        assert library.cache.get(asset.id) == b"cat.png bytes"

    def test_append_new_many_keeps_order(self, photos):
        assets = photos.append_new_many([b"one", b"two", b"three"])
        assert photos.records == assets
        assert [photos.blob(a) for a in photos] == [b"one", b"two", b"three"]

    def test_append_new_empty_rejected(self, photos, owner):
        with pytest.raises(InvalidDataError, match="empty"):
            photos.append_new(b"")
        assert photos.is_empty
        assert not (owner.folder / "photos.json").exists()

    def test_append_new_many_rolls_back_written_files(self, photos, owner):
        with pytest.raises(InvalidDataError):
            photos.append_new_many([b"good", b""])
        assert photos.is_empty
        assert list((owner.folder / "Photos").iterdir()) == []

    def test_append_new_undecodable(self, owner, temp_root):
        library = AssetLibrary(decoder=lambda data: None, temp_root=temp_root)
        with pytest.raises(InvalidDataError):
            owner.assets(library).append_new(b"not an image")

    def test_failed_save_discards_new_file(self, photos, owner, library, monkeypatch):
        monkeypatch.setattr(photos, "save", _failing_save)
        with pytest.raises(WriteError):
            photos.append_new(b"lost")
        assert photos.is_empty
        assert list((owner.folder / "Photos").iterdir()) == []
        assert len(library.cache) == 0

    def test_insert_new(self, photos):
        first = photos.insert_new(b"a")
        assert photos.records == [first]


class TestPromote:
    def test_promote_and_append(self, photos, owner, library, temp_root):
        temp = _temp(library, b"abc", 0)
        asset = photos.promote_and_append(temp)
        assert asset.id == temp.id
        assert asset.created_at == temp.created_at
        assert (owner.folder / "Photos" / str(temp.id)).read_bytes() == b"abc"
        assert not (temp_root / str(temp.id)).exists()
        assert photos.records == [asset]
        assert temp.promoted

    def test_promote_and_append_many(self, photos, library):
        temps = [_temp(library, b"old", 0), _temp(library, b"new", 5)]
        assets = photos.promote_and_append_many(temps)
        assert [a.id for a in photos] == [t.id for t in temps]
        assert [photos.blob(a) for a in assets] == [b"old", b"new"]

    def test_promote_and_insert_sorts_newest_first(self, photos, library):
        old = _temp(library, b"old", 0)
        new = _temp(library, b"new", 10)
        mid = _temp(library, b"mid", 5)
        for temp in (old, new, mid):
            photos.promote_and_insert(temp)
        assert [a.id for a in photos] == [new.id, mid.id, old.id]

    def test_failed_save_moves_file_back(self, photos, owner, library, monkeypatch):
        temp = _temp(library, b"abc", 0)
        monkeypatch.setattr(photos, "save", _failing_save)
        with pytest.raises(WriteError):
            photos.promote_and_append(temp)
        assert not temp.promoted
        assert temp.file_path.read_bytes() == b"abc"
        assert not (owner.folder / "Photos" / str(temp.id)).exists()
        assert photos.is_empty

    def test_failed_move_back_keeps_save_error(self, photos, library, monkeypatch):
        stuck, movable = _temp(library, b"stuck", 0), _temp(library, b"movable", 1)
        real_demote = library.demote

        def demote(permanent, temporary):
            if temporary is stuck:
                raise LocationError("cannot move back")
            real_demote(permanent, temporary)

        monkeypatch.setattr(library, "demote", demote)
        monkeypatch.setattr(photos, "save", _failing_save)
        with pytest.raises(WriteError, match="disk full"):
            photos.promote_and_append_many([movable, stuck])
        assert not movable.promoted
        assert movable.file_path.read_bytes() == b"movable"
        assert stuck.promoted
        assert photos.is_empty

    def test_promotion_is_cached(self, photos, library):
        temp = _temp(library, b"abc", 0)
        library.cache.clear()
        asset = photos.promote_and_append(temp)
        assert library.cache.get(asset.id) == b"abc"


class TestReadsAndDeletes:
    def test_first_blob_empty(self, photos):
        assert photos.first_blob() is None

    def test_first_blob_through_cache_and_disk(self, photos, library):
        photos.append_new_many([b"first", b"second"])
        assert photos.first_blob() == b"first"
        library.cache.clear()
        assert photos.first_blob() == b"first"

    def test_reload_binds_assets_to_owner(self, photos, owner, library):
        asset = photos.append_new(b"abc")
        library.cache.clear()
        reopened = owner.assets(library)
        loaded = reopened.load()
        assert loaded == [asset]
        assert loaded[0].parent == owner.folder
        assert reopened.blob(loaded[0]) == b"abc"

    def test_delete_removes_only_that_file(self, photos, owner, library):
        keep, drop = photos.append_new_many([b"keep", b"drop"])
        assert photos.delete(drop) is True
        assert (owner.folder / "Photos").is_dir()
        assert (owner.folder / "Photos" / keep.file_name).exists()
        assert not (owner.folder / "Photos" / drop.file_name).exists()
        assert library.cache.get(drop.id) is None
        assert [a.id for a in owner.assets(library).load()] == [keep.id]

    def test_empty_write_clears_asset(self, photos, library):
        asset = photos.append_new(b"abc")
        library.write(asset, b"")
        assert photos.blob(asset) is None


class TestPreview:
    def test_preview_never_writes_store_file(self, owner, library):
        photos = owner.assets(library, preview=True)
        asset = photos.append_new(b"abc")
        photos.promote_and_insert(_temp(library, b"def", 0))
        assert photos.count == 2
        assert photos.blob(asset) == b"abc"
        assert not (owner.container.path / "photos.json").exists()

    def test_preview_delete_keeps_asset_file(self, owner, library):
        stored = owner.assets(library).append_new(b"abc")
        photos = owner.assets(library, preview=True)
        assert photos.delete(stored) is True
        assert photos.is_empty
        assert (owner.folder / "Photos" / stored.file_name).read_bytes() == b"abc"
        assert [a.id for a in owner.assets(library).load()] == [stored.id]
