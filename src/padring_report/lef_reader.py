"""Reader for the subset of LEF used by the padring report.

Only the statements that feed the library builder are interpreted:
UNITS/DATABASE MICRONS, MACRO, CLASS, FOREIGN, SIZE, SYMMETRY, PIN,
DIRECTION, USE and the PORT CLASS of a pin. Every other block is skipped.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
import logging

from padring_report.library import Diagnostic, Library, LibraryBuilder

log = logging.getLogger(__name__)

# Top-level blocks closed by "END <name>" whose contents are ignored.
_SKIPPED_BLOCKS = {"SITE", "LAYER", "VIA", "VIARULE", "NONDEFAULTRULE"}


class LefSyntaxError(ValueError):
    """Raised when a recognized LEF statement carries an unusable value."""


def _tokenize(text: str) -> Iterator[str]:
    for line in text.splitlines():
        line = line.split("#", 1)[0]
        yield from line.replace(";", " ; ").split()


class _LefReader:
    def __init__(self, tokens: Iterable[str], builder: LibraryBuilder, source: str) -> None:
        self._tokens = iter(tokens)
        self._builder = builder
        self._source = source

    def _next(self) -> str | None:
        return next(self._tokens, None)

    def _statement(self) -> list[str]:
        """Return the remaining tokens of a statement, up to its ';'."""
        parts: list[str] = []
        while (tok := self._next()) is not None and tok != ";":
            parts.append(tok)
        return parts

    def _number(self, token: str | None, what: str) -> float:
        try:
            return float(token)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise LefSyntaxError(f"{self._source}: invalid {what} value {token!r}") from None

    def _skip_until_end(self, name: str) -> None:
        while (tok := self._next()) is not None:
            if tok == "END":
                if self._next() == name:
                    return

    def _skip_anonymous_block(self) -> None:
        # OBS and DENSITY contents are plain statements closed by a bare END.
        while (tok := self._next()) is not None:
            if tok == "END":
                return
            if tok != ";":
                self._statement()

    def read(self) -> None:
        while (tok := self._next()) is not None:
            if tok == "MACRO":
                self._read_macro(self._next() or "")
            elif tok == "UNITS":
                self._read_units()
            elif tok == "BEGINEXT":
                while (tok := self._next()) is not None and tok != "ENDEXT":
                    pass
            elif tok in ("PROPERTYDEFINITIONS", "SPACING"):
                # Unnamed blocks, closed by "END PROPERTYDEFINITIONS" etc.
                self._skip_until_end(tok)
            elif tok in _SKIPPED_BLOCKS:
                self._skip_until_end(self._next() or "")
            elif tok == "END":
                if self._next() == "LIBRARY":
                    return
            elif tok != ";":
                self._statement()

    def _read_units(self) -> None:
        while (tok := self._next()) is not None:
            if tok == "END":
                self._next()
                return
            parts = self._statement()
            if tok == "DATABASE" and parts and parts[0] == "MICRONS":
                self._builder.on_units(self._number(parts[1] if len(parts) > 1 else None, "DATABASE MICRONS"))

    def _read_macro(self, name: str) -> None:
        builder = self._builder
        builder.on_macro(name)
        while (tok := self._next()) is not None:
            if tok == "END":
                self._next()
                return
            if tok == "PIN":
                self._read_pin(self._next() or "")
            elif tok in ("OBS", "DENSITY"):
                self._skip_anonymous_block()
            elif tok == ";":
                continue
            else:
                parts = self._statement()
                if tok == "CLASS":
                    builder.on_class(" ".join(parts))
                elif tok == "FOREIGN":
                    ox = self._number(parts[1], "FOREIGN x") if len(parts) > 2 else 0.0
                    oy = self._number(parts[2], "FOREIGN y") if len(parts) > 2 else 0.0
                    builder.on_foreign(parts[0] if parts else "", ox, oy)
                elif tok == "SIZE":
                    if len(parts) != 3 or parts[1] != "BY":
                        raise LefSyntaxError(f"{self._source}: malformed SIZE in macro {name}: {' '.join(parts)}")
                    builder.on_size(self._number(parts[0], "SIZE"), self._number(parts[2], "SIZE"))
                elif tok == "SYMMETRY":
                    builder.on_symmetry(" ".join(parts))

    def _read_pin(self, name: str) -> None:
        builder = self._builder
        builder.on_pin(name)
        while (tok := self._next()) is not None:
            if tok == "END":
                self._next()
                return
            if tok == "PORT":
                self._read_port()
            elif tok == ";":
                continue
            else:
                parts = self._statement()
                if tok == "DIRECTION":
                    builder.on_pin_direction(" ".join(parts))
                elif tok == "USE":
                    builder.on_pin_use(" ".join(parts))

    def _read_port(self) -> None:
        while (tok := self._next()) is not None:
            if tok == "END":
                return
            if tok == ";":
                continue
            parts = self._statement()
            if tok == "CLASS":
                self._builder.on_pin_class(" ".join(parts))


def read_lef_text(text: str, builder: LibraryBuilder, source: str = "<string>") -> None:
    """Feed the events found in LEF ``text`` to ``builder``.

    The builder is not finished, so several files can be read into the
    same library before calling ``builder.finish()``.
    """
    _LefReader(_tokenize(text), builder, source).read()


def read_lef(path: str | Path, builder: LibraryBuilder) -> None:
    path = Path(path)
    log.info("Reading LEF %s", path)
    read_lef_text(path.read_text(), builder, source=str(path))


def load_library(paths: Iterable[str | Path]) -> tuple[Library, list[Diagnostic]]:
    """Read all LEF files into one library and return it with its diagnostics."""
    builder = LibraryBuilder()
    for path in paths:
        read_lef(path, builder)
    builder.finish()
    log.info("Library holds %d cells", len(builder.library))
    return builder.library, builder.diagnostics
