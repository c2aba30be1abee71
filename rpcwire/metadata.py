"""Custom call metadata carried in HTTP headers."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Iterable

from .errors import MetadataDecodeError

Header = tuple[str, bytes]


def _to_bytes(value: bytes | bytearray | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


@dataclass(frozen=True)
class MetadataKey:
    """Non-empty metadata key; keys ending in ``-bin`` carry binary values."""

    name: str

    def __post_init__(self) -> None:
        name = self.name
        if isinstance(name, (bytes, bytearray)):
            name = bytes(name).decode("utf-8")
            object.__setattr__(self, "name", name)
        if not name:
            raise ValueError("metadata key must not be empty")

    def is_bin(self) -> bool:
        """Whether the value is binary and base64-encoded on the wire."""
        return self.name.endswith("-bin")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class MetadataEntry:
    """A single metadata key and its raw value."""

    key: MetadataKey
    value: bytes

    def to_header(self) -> Header:
        """Encode as an HTTP header pair."""
        value = base64.b64encode(self.value) if self.key.is_bin() else self.value
        return self.key.name, value

    @classmethod
    def from_header(cls, name: str, value: bytes | str) -> MetadataEntry | None:
        """Decode a header; pseudo and ``grpc-`` headers give ``None``."""
        if name.startswith(":") or name.startswith("grpc-"):
            return None
        key = MetadataKey(name)
        raw = _to_bytes(value)
        if key.is_bin():
            try:
                raw = base64.b64decode(raw, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise MetadataDecodeError(exc) from exc
        return cls(key, raw)


@dataclass
class Metadata:
    """Ordered collection of metadata entries."""

    entries: list[MetadataEntry] = field(default_factory=list)

    @classmethod
    def from_headers(cls, headers: Iterable[tuple[str, bytes | str]]) -> Metadata:
        """Collect metadata from HTTP headers, skipping protocol headers."""
        entries = []
        for name, value in headers:
            entry = MetadataEntry.from_header(name, value)
            if entry is not None:
                entries.append(entry)
        return cls(entries)

    def to_headers(self) -> list[Header]:
        """Encode every entry as an HTTP header pair."""
        return [entry.to_header() for entry in self.entries]

    def get(self, name: str) -> bytes | None:
        """Value of the first entry with the given key, or ``None``."""
        return next((e.value for e in self.entries if e.key.name == name), None)

    def extend(self, other: Metadata) -> None:
        """Append all entries of ``other``."""
        self.entries.extend(other.entries)

    def add(self, key: MetadataKey | str, value: bytes | str) -> None:
        """Append one entry."""
        if not isinstance(key, MetadataKey):
            key = MetadataKey(key)
        self.entries.append(MetadataEntry(key, _to_bytes(value)))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)