"""Collapse duplicate ``Member`` entries sharing a stable identifier."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from lxml import etree

from ..document import child_elements, member_docid, remove_element
from ..logging import get_logger
from .base import MemberEntry, PolicyError
from .policies import KeepMostCompletePolicy, LosingElementPolicy

logger = get_logger("repair.members")


class MemberDeduplicator:
    """Keeps one ``Members/Member`` per DocId, as chosen by the losing-element policy.

    Members without a DocId signature are never grouped with anything.
    """

    def __init__(self, policy: Optional[LosingElementPolicy] = None) -> None:
        self.policy = policy or KeepMostCompletePolicy()

    def collect(self, root: etree._Element) -> List[MemberEntry]:
        entries: List[MemberEntry] = []
        for members in child_elements(root, "Members"):
            for member in child_elements(members, "Member"):
                entries.append(
                    MemberEntry(position=len(entries), identifier=member_docid(member), element=member)
                )
        return entries

    def group(self, entries: Sequence[MemberEntry]) -> Dict[str, List[MemberEntry]]:
        groups: Dict[str, List[MemberEntry]] = {}
        for entry in entries:
            if entry.identifier is None:
                continue
            groups.setdefault(entry.identifier, []).append(entry)
        return groups

    def deduplicate(self, root: etree._Element) -> int:
        """Remove losing duplicates from ``root`` and return how many were removed."""
        removed = 0
        for identifier, group in self.group(self.collect(root)).items():
            if len(group) == 1:
                logger.debug("%s is clean", identifier)
                continue

            losers = self.policy.select_losers(group)
            self._check_losers(identifier, group, losers)
            for loser in losers:
                remove_element(loser.element)
            removed += len(losers)
            logger.debug(
                "%s is dirty: %d members share it, removed positions %s",
                identifier,
                len(group),
                [loser.position for loser in losers],
            )
        return removed

    def _check_losers(
        self, identifier: str, group: Sequence[MemberEntry], losers: Sequence[MemberEntry]
    ) -> None:
        candidates = {id(entry) for entry in group}
        chosen = {id(entry) for entry in losers}
        if len(chosen) != len(losers) or not chosen <= candidates:
            raise PolicyError(
                f"Policy {self.policy.name or type(self.policy).__name__} returned members outside the "
                f"duplicate group for {identifier}"
            )
        if len(group) - len(chosen) != 1:
            raise PolicyError(
                f"Policy {self.policy.name or type(self.policy).__name__} left "
                f"{len(group) - len(chosen)} survivors for {identifier}"
            )


__all__ = ["MemberDeduplicator"]
