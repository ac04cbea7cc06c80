"""Padring data model and oriented footprint resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Literal

from padring_report.library import CellRecord

log = logging.getLogger(__name__)

Location = Literal["N", "S", "E", "W", "NE", "NW", "SE", "SW"]


class ItemKind(str, Enum):
    CELL = "cell"
    BOND = "bond"
    CORNER = "corner"
    FILLER = "filler"
    SPACE = "space"


class Side(str, Enum):
    SOUTH = "SOUTH"
    EAST = "EAST"
    NORTH = "NORTH"
    WEST = "WEST"


@dataclass
class PlacedItem:
    """One item placed in the ring by the placement step."""

    kind: ItemKind
    location: Location
    x: float
    y: float
    cell: CellRecord | None
    instance: str
    cell_name: str
    has_bond: bool = False
    ref: PlacedItem | None = None


@dataclass
class RingAssembly:
    """The four ordered sides of the padring."""

    design_name: str
    south: list[PlacedItem] = field(default_factory=list)
    east: list[PlacedItem] = field(default_factory=list)
    north: list[PlacedItem] = field(default_factory=list)
    west: list[PlacedItem] = field(default_factory=list)

    def walk(self) -> list[tuple[Side, PlacedItem]]:
        """Return all items as one continuous perimeter walk.

        South and east are taken front to back, north and west back to front.
        """
        walk = [(Side.SOUTH, item) for item in self.south]
        walk += [(Side.EAST, item) for item in self.east]
        walk += [(Side.NORTH, item) for item in reversed(self.north)]
        walk += [(Side.WEST, item) for item in reversed(self.west)]
        return walk


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass
class Footprint:
    """Resolved outline of a placed item."""

    rotation: float  # degrees
    position: Point  # origin after the orientation offset
    corners: tuple[Point, Point, Point, Point]  # ll, ul, ur, lr, rotated and placed
    centroid: Point


def orientation_transform(location: str, width: float, height: float) -> tuple[float, float, float]:
    """Return (rotation_deg, dx, dy) for an orientation label.

    Regular cells use N, S, E, W; corner cells use NE, NW, SE.
    """
    if location == "S":
        return 0.0, 0.0, 0.0
    if location == "N":
        return 180.0, width, 0.0
    if location == "E":
        return 90.0, 0.0, 0.0
    if location == "W":
        # Offset by the width, not the height, for compatibility with existing reports.
        return 270.0, 0.0, width
    if location == "NW":
        return 270.0, 0.0, 0.0
    if location == "NE":
        return 180.0, width, 0.0
    if location == "SE":
        return 90.0, height, 0.0
    # TODO: decide the SW corner transform once a placement flow that emits SW is available.
    log.warning("No orientation rule for location '%s'; using 0 degrees without offset", location)
    return 0.0, 0.0, 0.0


def _snap(value: float) -> float:
    # Keep quarter turns exact and avoid negative zero.
    return round(value, 12) + 0.0


def resolve_footprint(item: PlacedItem) -> Footprint:
    if item.cell is None:
        raise ValueError(f"item {item.instance} has no library cell")
    width = item.cell.width
    height = item.cell.height
    rotation, dx, dy = orientation_transform(item.location, width, height)
    x = item.x + dx
    y = item.y + dy

    theta = math.radians(rotation)
    cos_t = _snap(math.cos(theta))
    sin_t = _snap(math.sin(theta))

    outline = ((0.0, 0.0), (0.0, height), (width, height), (width, 0.0))
    ll, ul, ur, lr = (
        Point(px * cos_t - py * sin_t + x + 0.0, px * sin_t + py * cos_t + y + 0.0)
        for px, py in outline
    )
    centroid = Point(0.5 * (ll.x + ur.x), 0.5 * (ll.y + ur.y))
    return Footprint(rotation=rotation, position=Point(x, y), corners=(ll, ul, ur, lr), centroid=centroid)
