"""Collapse duplicate documentation-body elements inside ``Docs`` nodes."""

from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from lxml import etree

from ..config import DEFAULT_UNARY_KINDS
from ..document import child_elements, local_name, remove_element
from ..logging import get_logger
from .base import normalize_whitespace

logger = get_logger("repair.content")

Fingerprint = Tuple[str, Tuple[Tuple[str, str], ...], str]


class ContentDeduplicator:
    """Enforces the one-per-kind and no-repeated-content rules on ``Docs`` children.

    Unary kinds keep their first instance whatever the others contain. Every
    other kind is compared by fingerprint: the attributes, compared exactly, and
    the inner markup, trimmed, whitespace runs collapsed and case-folded unless
    ``case_sensitive`` is set. The first occurrence of each fingerprint wins.
    """

    def __init__(
        self,
        unary_kinds: Iterable[str] = DEFAULT_UNARY_KINDS,
        *,
        case_sensitive: bool = False,
    ) -> None:
        self.unary_kinds = frozenset(unary_kinds)
        self.case_sensitive = case_sensitive

    def fingerprint(self, element: etree._Element) -> Fingerprint:
        inner = (element.text or "") + "".join(
            etree.tostring(child, encoding="unicode", with_tail=True) for child in element
        )
        content = normalize_whitespace(inner)
        if not self.case_sensitive:
            content = content.casefold()
        return (local_name(element) or "", tuple(sorted(element.attrib.items())), content)

    def deduplicate(self, root: etree._Element) -> int:
        """Deduplicate every ``Docs`` node under ``root``; return the number removed."""
        docs_nodes = [element for element in root.iter() if local_name(element) == "Docs"]
        return sum(self.deduplicate_docs(docs) for docs in docs_nodes)

    def deduplicate_docs(self, docs: etree._Element) -> int:
        seen_unary: Set[str] = set()
        seen_content: Set[Fingerprint] = set()
        losers: List[etree._Element] = []

        for child in child_elements(docs):
            kind = local_name(child)
            if kind in self.unary_kinds:
                if kind in seen_unary:
                    losers.append(child)
                else:
                    seen_unary.add(kind)
                continue

            key = self.fingerprint(child)
            if key in seen_content:
                losers.append(child)
            else:
                seen_content.add(key)

        for loser in losers:
            logger.debug("Removing duplicate <%s> from Docs", local_name(loser))
            remove_element(loser)
        return len(losers)


__all__ = ["ContentDeduplicator"]
