"""Pydantic models for the YAML padring description."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, PrivateAttr, model_validator

from padring_report.geometry import ItemKind, PlacedItem, RingAssembly
from padring_report.library import Library


class RingItemConfig(BaseModel):
    instance: str
    cell: str
    kind: Literal["cell", "bond", "corner", "filler", "space"] = "cell"
    location: Literal["N", "S", "E", "W", "NE", "NW", "SE", "SW"]
    x: float
    y: float
    ref: str | None = None


class RingConfig(BaseModel):
    south: list[RingItemConfig] = []
    east: list[RingItemConfig] = []
    north: list[RingItemConfig] = []
    west: list[RingItemConfig] = []

    def sides(self) -> dict[str, list[RingItemConfig]]:
        return {"south": self.south, "east": self.east, "north": self.north, "west": self.west}


class Config(BaseModel):
    design: str
    lef_files: list[Path]
    report_file: str = "pin_assignment.csv"
    ring: RingConfig

    _config_path: Path | None = PrivateAttr(default=None)

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    @model_validator(mode="after")
    def validate_semantics(self) -> Config:
        if not self.lef_files:
            raise ValueError("lef_files must list at least one LEF file")

        instances: set[str] = set()
        for side, items in self.ring.sides().items():
            for item in items:
                if item.instance in instances:
                    raise ValueError(f"ring.{side}: duplicate instance name '{item.instance}'")
                instances.add(item.instance)

        for side, items in self.ring.sides().items():
            for item in items:
                if item.ref is None:
                    continue
                if item.kind != "bond":
                    raise ValueError(f"ring.{side}[{item.instance}]: only bond items may set ref")
                if item.ref not in instances:
                    raise ValueError(f"ring.{side}[{item.instance}]: ref '{item.ref}' is not a ring instance")

        return self


def load_config(path: str | Path) -> Config:
    """Load and validate a YAML padring description."""
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: config file must be a YAML mapping")

    # Resolve LEF paths relative to the config location before model validation.
    lef_files = []
    for entry in raw.get("lef_files") or []:
        lef_path = Path(entry)
        if not lef_path.is_absolute():
            lef_path = (path.parent / lef_path).resolve()
        lef_files.append(str(lef_path))
    raw["lef_files"] = lef_files

    config = Config.model_validate(raw)
    config._config_path = path
    return config


def build_ring(config: Config, library: Library) -> RingAssembly:
    """Assemble the placed items of ``config`` against the cells of ``library``."""
    ring = RingAssembly(design_name=config.design)
    by_instance: dict[str, PlacedItem] = {}
    pending_refs: list[tuple[PlacedItem, str]] = []

    for side, items in config.ring.sides().items():
        placed_side: list[PlacedItem] = getattr(ring, side)
        for item_cfg in items:
            cell = library.get_cell(item_cfg.cell)
            # Corners, fillers and spaces are never reported, so their cell may be absent.
            if cell is None and item_cfg.kind in ("cell", "bond"):
                raise ValueError(f"ring.{side}[{item_cfg.instance}]: cell '{item_cfg.cell}' not found in LEF library")

            item = PlacedItem(
                kind=ItemKind(item_cfg.kind),
                location=item_cfg.location,
                x=item_cfg.x,
                y=item_cfg.y,
                cell=cell,
                instance=item_cfg.instance,
                cell_name=item_cfg.cell,
            )
            placed_side.append(item)
            by_instance[item.instance] = item
            if item_cfg.ref is not None:
                pending_refs.append((item, item_cfg.ref))

    for bond, ref_name in pending_refs:
        target = by_instance[ref_name]
        bond.ref = target
        if target.kind is ItemKind.CELL:
            target.has_bond = True

    return ring
