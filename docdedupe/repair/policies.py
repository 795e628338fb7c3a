"""Losing-element policies for duplicate members."""

from __future__ import annotations

from abc import ABC, abstractmethod
from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from ..document import child_elements, first_child, text_content
from .base import MemberEntry, normalize_whitespace

_ENTRY_POINT_GROUP = "docdedupe.policies"

PLACEHOLDER_TEXT = "To be added."


class LosingElementPolicy(ABC):
    """Decides which members of a duplicate group are discarded.

    Implementations receive the group in document order and must return every
    entry except one. They are shared across worker threads and must not keep
    per-call state.
    """

    name: str = ""

    @abstractmethod
    def select_losers(self, entries: Sequence[MemberEntry]) -> List[MemberEntry]:
        """Return the entries to remove from the document."""


def _all_but(entries: Sequence[MemberEntry], survivor: MemberEntry) -> List[MemberEntry]:
    return [entry for entry in entries if entry is not survivor]


class KeepFirstPolicy(LosingElementPolicy):
    name = "first"

    def select_losers(self, entries: Sequence[MemberEntry]) -> List[MemberEntry]:
        if not entries:
            return []
        return _all_but(entries, entries[0])


class KeepLastPolicy(LosingElementPolicy):
    name = "last"

    def select_losers(self, entries: Sequence[MemberEntry]) -> List[MemberEntry]:
        if not entries:
            return []
        return _all_but(entries, entries[-1])


class KeepMostCompletePolicy(LosingElementPolicy):
    """Keeps the best-documented member; ties go to the earliest one.

    A body element counts as documented when its text is neither empty nor the
    ``To be added.`` placeholder. Total documented text length breaks ties
    between members with the same number of documented elements.
    """

    name = "most-complete"

    def select_losers(self, entries: Sequence[MemberEntry]) -> List[MemberEntry]:
        if not entries:
            return []
        best = entries[0]
        best_score = completeness(best)
        for entry in entries[1:]:
            score = completeness(entry)
            if score > best_score:
                best, best_score = entry, score
        return _all_but(entries, best)


def completeness(entry: MemberEntry) -> Tuple[int, int]:
    docs = first_child(entry.element, "Docs")
    if docs is None:
        return (0, 0)
    documented = 0
    length = 0
    for child in child_elements(docs):
        text = normalize_whitespace(text_content(child))
        if not text or text == PLACEHOLDER_TEXT:
            continue
        documented += 1
        length += len(text)
    return (documented, length)


_BUILTIN_FACTORIES: Dict[str, Callable[[], LosingElementPolicy]] = {
    KeepMostCompletePolicy.name: KeepMostCompletePolicy,
    KeepFirstPolicy.name: KeepFirstPolicy,
    KeepLastPolicy.name: KeepLastPolicy,
}


def available_policies() -> List[str]:
    names = list(_BUILTIN_FACTORIES)
    for entry in _iter_entry_points():
        if entry.name.lower() not in names:
            names.append(entry.name.lower())
    return names


def resolve_policy(name: str) -> LosingElementPolicy:
    """Return the policy registered under ``name`` (built-in or entry point)."""
    key = name.strip().lower()
    factory = _BUILTIN_FACTORIES.get(key)
    if factory is not None:
        return factory()

    for entry in _iter_entry_points():
        if entry.name.lower() != key:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load policy entry point '{entry.name}': {exc}") from exc
        return _coerce_policy(loaded)

    known = ", ".join(available_policies())
    raise ValueError(f"Unknown losing-element policy '{name}' (known: {known})")


def _coerce_policy(obj: object) -> LosingElementPolicy:
    if isinstance(obj, LosingElementPolicy):
        return obj
    if isinstance(obj, type) and issubclass(obj, LosingElementPolicy):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, LosingElementPolicy):
            return instance
    raise TypeError("Policy entry point must be a LosingElementPolicy subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover - defensive guard
        return []
    return entry_points.select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "KeepFirstPolicy",
    "KeepLastPolicy",
    "KeepMostCompletePolicy",
    "LosingElementPolicy",
    "available_policies",
    "completeness",
    "resolve_policy",
]
