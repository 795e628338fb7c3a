"""Authoritative identifier set built from the framework index."""

from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List

from lxml import etree

from ..logging import get_logger

logger = get_logger("identifiers")


class IndexLoadError(RuntimeError):
    """Raised when the framework index cannot be turned into an identifier set."""


class IdentifierSet:
    """Immutable, case-insensitive set of stable identifiers."""

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[str] = ()) -> None:
        self._values: FrozenSet[str] = frozenset(value.casefold() for value in values)

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, str):
            return False
        return value.casefold() in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"IdentifierSet({len(self._values)} identifiers)"


class IdentifierCache:
    """Scans the index directory for every ``Id`` attribute.

    Malformed index documents abort the build unless ``skip_malformed`` is set,
    in which case they are logged and left out. A missing index directory, or
    an index that yields no identifier at all, always aborts: validating a
    corpus against an empty set would delete every file in it.
    """

    def __init__(self, index_path: Path, *, skip_malformed: bool = False) -> None:
        self.index_path = index_path
        self.skip_malformed = skip_malformed
        self.skipped: List[Path] = []

    def build(self) -> IdentifierSet:
        if not self.index_path.is_dir():
            raise IndexLoadError(f"Index directory not found: {self.index_path}")

        identifiers: set[str] = set()
        documents = sorted(
            path for path in self.index_path.rglob("*") if path.is_file() and path.suffix.lower() == ".xml"
        )
        for path in documents:
            try:
                found = self._read_identifiers(path)
            except (etree.XMLSyntaxError, OSError) as exc:
                if not self.skip_malformed:
                    raise IndexLoadError(f"Malformed index document {path}: {exc}") from exc
                logger.warning("Skipping malformed index document %s: %s", path, exc)
                self.skipped.append(path)
                continue
            logger.debug("Index document %s contributed %d identifiers", path.name, len(found))
            identifiers.update(found)

        if not identifiers:
            raise IndexLoadError(f"No identifiers found under {self.index_path}")

        result = IdentifierSet(identifiers)
        logger.info(
            "Loaded %d identifiers from %d index documents", len(result), len(documents) - len(self.skipped)
        )
        return result

    @staticmethod
    def _read_identifiers(path: Path) -> set[str]:
        found: set[str] = set()
        for _, element in etree.iterparse(
            str(path), events=("end",), resolve_entities=False, no_network=True
        ):
            value = element.get("Id")
            if value:
                found.add(value)
            element.clear(keep_tail=True)
            parent = element.getparent()
            if parent is not None:
                while element.getprevious() is not None:
                    del parent[0]
        return found


__all__ = ["IdentifierCache", "IdentifierSet", "IndexLoadError"]
