"""Cell library database and the event-driven builder that fills it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging

log = logging.getLogger(__name__)


class PinDirection(str, Enum):
    INPUT = "INPUT"
    OUTPUT = "OUTPUT"
    OTHER = "OTHER"

    @classmethod
    def decode(cls, keyword: str) -> PinDirection:
        if "INPUT" in keyword:
            return cls.INPUT
        if "OUTPUT" in keyword:
            return cls.OUTPUT
        return cls.OTHER


class PinUse(str, Enum):
    SIGNAL = "SIGNAL"
    POWER = "POWER"
    GROUND = "GROUND"

    @classmethod
    def decode(cls, keyword: str) -> PinUse:
        if "SIGNAL" in keyword:
            return cls.SIGNAL
        if "POWER" in keyword:
            return cls.POWER
        if "GROUND" in keyword:
            return cls.GROUND
        return cls.SIGNAL


class PinClass(str, Enum):
    CORE = "CORE"
    OTHER = "OTHER"

    @classmethod
    def decode(cls, keyword: str) -> PinClass | None:
        """Return CORE for core port classes, None when the keyword says nothing."""
        if "CORE" in keyword:
            return cls.CORE
        return None


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Diagnostic:
    """An advisory problem found while building the library."""

    severity: Severity
    message: str
    cell: str | None = None
    pin: str | None = None

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message}"


@dataclass
class PinRecord:
    name: str
    direction: PinDirection = PinDirection.OTHER
    use: PinUse = PinUse.SIGNAL
    pin_class: PinClass = PinClass.OTHER


@dataclass
class CellRecord:
    """One physical library cell (a LEF macro)."""

    name: str
    width: float = 0.0
    height: float = 0.0
    foreign: str = ""
    symmetry: str = ""
    is_filler: bool = False
    pins: dict[str, PinRecord] = field(default_factory=dict)


@dataclass
class Library:
    """Complete cell library, the single owner of all cell and pin records."""

    cells: dict[str, CellRecord] = field(default_factory=dict)
    units_per_micron: float = 0.0

    def get_cell(self, name: str) -> CellRecord | None:
        return self.cells.get(name)

    def fillers(self) -> list[CellRecord]:
        return [c for c in self.cells.values() if c.is_filler]

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, name: object) -> bool:
        return name in self.cells


class LibraryBuilder:
    """Accumulate cell records from an ordered stream of LEF events.

    Each handler works against the currently open cell (and, for pin
    events, the currently open pin). Problems never abort the stream:
    every handler returns the diagnostics it raised, which are also
    logged and collected in ``diagnostics``.
    """

    def __init__(self, library: Library | None = None) -> None:
        self.library = library if library is not None else Library()
        self.diagnostics: list[Diagnostic] = []
        self._cell: CellRecord | None = None
        self._pin: PinRecord | None = None

    @property
    def current_cell(self) -> CellRecord | None:
        return self._cell

    @property
    def current_pin(self) -> PinRecord | None:
        return self._pin

    def _report(
        self,
        found: list[Diagnostic],
        severity: Severity,
        message: str,
        pin: str | None = None,
    ) -> None:
        cell = self._cell.name if self._cell is not None else None
        diag = Diagnostic(severity=severity, message=message, cell=cell, pin=pin)
        level = logging.ERROR if severity is Severity.ERROR else logging.WARNING
        log.log(level, message)
        found.append(diag)
        self.diagnostics.append(diag)

    def _require_cell(self, event: str, found: list[Diagnostic]) -> CellRecord | None:
        if self._cell is None:
            self._report(found, Severity.ERROR, f"got {event} before finding a macro")
        return self._cell

    def _require_pin(self, event: str, found: list[Diagnostic]) -> PinRecord | None:
        if self._pin is None:
            self._report(found, Severity.ERROR, f"got {event} before finding a pin")
        return self._pin

    def _check_integrity(self, found: list[Diagnostic]) -> None:
        cell = self._cell
        if cell is None:
            return

        if not cell.foreign:
            cell.foreign = cell.name

        if not cell.name:
            self._report(found, Severity.ERROR, "current cell has no name")
            return

        if cell.width == 0.0 or cell.height == 0.0:
            self._report(found, Severity.ERROR, f"cell {cell.name} has zero width or height")

    def on_macro(self, name: str) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        self._check_integrity(found)
        self._pin = None

        existing = self.library.cells.get(name)
        if existing is not None:
            self._cell = existing
            self._report(found, Severity.WARNING, f"Cell {name} already in database - replaced")
        else:
            self._cell = CellRecord(name=name)
            self.library.cells[name] = self._cell
            log.debug("Added LEF cell %s", name)
        return found

    def on_size(self, width: float, height: float) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        cell = self._require_cell("size", found)
        if cell is not None:
            cell.width = width
            cell.height = height
        return found

    def on_foreign(self, name: str, ox: float = 0.0, oy: float = 0.0) -> list[Diagnostic]:
        # The foreign origin offset is accepted but not recorded.
        found: list[Diagnostic] = []
        cell = self._require_cell("foreign", found)
        if cell is not None:
            cell.foreign = name
        return found

    def on_symmetry(self, symmetry: str) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        cell = self._require_cell("symmetry", found)
        if cell is not None:
            cell.symmetry = symmetry
        return found

    def on_class(self, class_name: str) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        cell = self._require_cell("class", found)
        if cell is not None:
            cell.is_filler = "SPACER" in class_name
        return found

    def on_units(self, units_per_micron: float) -> list[Diagnostic]:
        self.library.units_per_micron = units_per_micron
        return []

    def on_pin(self, name: str) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        cell = self._require_cell("pin", found)
        if cell is None:
            return found

        existing = cell.pins.get(name)
        if existing is not None:
            self._pin = existing
            self._report(found, Severity.WARNING, f"Pin {name} already in database - replaced", pin=name)
        else:
            self._pin = PinRecord(name=name)
            cell.pins[name] = self._pin
            log.debug("Added LEF pin %s", name)
        return found

    def on_pin_direction(self, direction: PinDirection | str) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        pin = self._require_pin("pin direction", found)
        if pin is not None:
            if not isinstance(direction, PinDirection):
                direction = PinDirection.decode(direction)
            pin.direction = direction
        return found

    def on_pin_use(self, use: PinUse | str) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        pin = self._require_pin("pin use", found)
        if pin is not None:
            if not isinstance(use, PinUse):
                use = PinUse.decode(use)
            pin.use = use
        return found

    def on_pin_class(self, pin_class: PinClass | str) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        pin = self._require_pin("pin class", found)
        if pin is not None:
            if not isinstance(pin_class, PinClass):
                pin_class = PinClass.decode(pin_class)
            if pin_class is not None:
                pin.pin_class = pin_class
        return found

    def finish(self) -> list[Diagnostic]:
        """Close the stream: check the open cell and reset the cursor."""
        found: list[Diagnostic] = []
        self._check_integrity(found)
        self._cell = None
        self._pin = None
        return found
