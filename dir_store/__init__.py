"""File-system backed record collections with cached binary assets."""

from .asset_cache import AssetCache, Expiry
from .asset_collection import AssetCollection, AssetOwner
from .asset_library import AssetLibrary, passthrough_decoder
from .asset_record import AssetRecord, PermanentAsset, TemporaryAsset
from .container import Container, ContainerResolver
from .errors import (
    AssetConsumedError,
    DecodeError,
    DirStoreError,
    EncodeError,
    InvalidDataError,
    LocationError,
    WriteError,
)
from .record import Record
from .record_store import RecordStore, SortedRecordStore
