"""An in-memory route guide service: features, routes and chat notes."""

from __future__ import annotations

import json
import math
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

ROUTE_GUIDE_DB_PATH = "testdata/route_guide_db.json"

_COORD_FACTOR = 1e7
_EARTH_RADIUS_M = 6371000.0
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U32_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class Point:
    """Latitude and longitude in degrees multiplied by 10**7."""

    latitude: int = 0
    longitude: int = 0


@dataclass(frozen=True)
class Rectangle:
    """A latitude-longitude rectangle given by two opposite corners."""

    lo: Point = field(default_factory=Point)
    hi: Point = field(default_factory=Point)


@dataclass(frozen=True)
class Feature:
    """A named place."""

    name: str = ""
    location: Point = field(default_factory=Point)


@dataclass(frozen=True)
class RouteNote:
    """A message left at a location."""

    location: Point = field(default_factory=Point)
    message: str = ""


@dataclass(frozen=True)
class RouteSummary:
    """Statistics of a traversed route."""

    point_count: int = 0
    feature_count: int = 0
    distance: int = 0
    elapsed_time: int = 0


def in_range(point: Point, rect: Rectangle) -> bool:
    """Whether ``point`` lies inside ``rect``, edges included."""
    left = min(rect.lo.longitude, rect.hi.longitude)
    right = max(rect.lo.longitude, rect.hi.longitude)
    top = max(rect.lo.latitude, rect.hi.latitude)
    bottom = min(rect.lo.latitude, rect.hi.latitude)
    return left <= point.longitude <= right and bottom <= point.latitude <= top


def calc_distance(p1: Point, p2: Point) -> int:
    """Great-circle distance between two points in whole metres."""
    lat1 = math.radians(p1.latitude / _COORD_FACTOR)
    lat2 = math.radians(p2.latitude / _COORD_FACTOR)
    lng1 = math.radians(p1.longitude / _COORD_FACTOR)
    lng2 = math.radians(p2.longitude / _COORD_FACTOR)
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    if not 0.0 <= a <= 1.0:
        return 0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return int(_EARTH_RADIUS_M * c)


def serialize(point: Point) -> str:
    """Key identifying a point's location."""
    return f"{point.latitude} {point.longitude}"


def _require(obj: dict, key: str) -> Any:
    if key not in obj:
        raise ValueError(f"missing {key!r}")
    return obj[key]


def _as_i32(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key!r} is not an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{key!r} is not an integer")
        value = int(value)
    if not _I32_MIN <= value <= _I32_MAX:
        raise ValueError(f"{key!r} is out of range")
    return value


def _feature_from_json(item: Any) -> Feature:
    if not isinstance(item, dict):
        raise ValueError("feature is not an object")
    location = _require(item, "location")
    if not isinstance(location, dict):
        raise ValueError("location is not an object")
    name = _require(item, "name")
    if not isinstance(name, str):
        raise ValueError("name is not a string")
    return Feature(
        name=name,
        location=Point(
            latitude=_as_i32(_require(location, "latitude"), "latitude"),
            longitude=_as_i32(_require(location, "longitude"), "longitude"),
        ),
    )


def load_features(path: str | Path) -> list[Feature]:
    """Read features from a JSON array file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("feature database is not an array")
    return [_feature_from_json(item) for item in data]


class RouteGuide:
    """Service answering feature lookups, route summaries and route chat."""

    def __init__(self, features: Iterable[Feature] = ()) -> None:
        self.saved_features: list[Feature] = list(features)
        self._route_notes: dict[str, list[RouteNote]] = {}
        self._lock = threading.Lock()

    def get_feature(self, point: Point) -> Feature:
        """The feature at ``point``, or an unnamed feature there."""
        return next(
            (f for f in self.saved_features if f.location == point),
            Feature(location=point),
        )

    def list_features(self, rect: Rectangle) -> Iterator[Feature]:
        """All saved features inside ``rect``."""
        return (f for f in list(self.saved_features) if in_range(f.location, rect))

    def record_route(self, points: Iterable[Point]) -> RouteSummary:
        """Summarize a route given as a sequence of points."""
        start = time.monotonic()
        point_count = feature_count = distance = 0
        last_point: Point | None = None
        for point in points:
            point_count += 1
            feature_count += sum(1 for f in self.saved_features if f.location == point)
            if last_point is not None:
                distance += calc_distance(last_point, point)
            last_point = point
        return RouteSummary(
            point_count=point_count,
            feature_count=feature_count,
            distance=distance & _U32_MASK,
            elapsed_time=int(time.monotonic() - start),
        )

    def route_chat(self, notes: Iterable[RouteNote]) -> Iterator[RouteNote]:
        """For each incoming note, store it and yield every note at its location."""
        for note in notes:
            key = serialize(note.location)
            with self._lock:
                stored = self._route_notes.setdefault(key, [])
                stored.append(note)
                snapshot = list(stored)
            yield from snapshot