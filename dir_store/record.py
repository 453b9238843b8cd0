"""Base record: the data contract shared by everything a store persists."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .container import Container, ContainerResolver, default_resolver
from .errors import LocationError

T = TypeVar("T", bound="Record")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """A serializable value that owns a folder on disk.

    The folder ("container") is ``parent / folder_name``.  ``parent`` is
    runtime-only: it is never written to the store file and is re-attached
    by the owning store on load.

    Records compare equal by ``id`` and sort newest ``created_at`` first.
    """

    model_config = ConfigDict(extra="allow")

    resolver: ClassVar[ContainerResolver] = default_resolver

    # Identity
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    created_at: datetime = Field(default_factory=utc_now)

    # Location
    parent: Path | None = Field(default=None, exclude=True)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are read as UTC so every pair stays comparable.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    # -- Location helpers --

    @property
    def folder_name(self) -> str:
        """Name of this record's container. Subclasses pick a human name."""
        return str(self.id)

    @property
    def container(self) -> Container:
        if self.parent is None:
            raise LocationError(f"{type(self).__name__} {self.id} has no parent folder")
        return self.resolver.resolve(self.folder_name, self.parent)

    @property
    def folder(self) -> Path:
        """The container folder. Creates it if needed."""
        return self.resolver.ensure(self.container)

    def bind(self: T, parent: str | Path) -> T:
        """Attach the folder this record's container lives in."""
        self.parent = Path(parent)
        return self

    def will_discard(self) -> None:
        """Called by a store right after this record is removed from it."""
        self.resolver.destroy(self.container)

    # -- Identity and order --

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __lt__(self, other: Record) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.created_at > other.created_at
