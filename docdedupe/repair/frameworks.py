"""Cross-check DocId declarations against the authoritative index."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from lxml import etree

from ..document import enclosing, is_empty, iter_docid_declarations, local_name, remove_element
from ..logging import get_logger
from ..stores import IdentifierSet

logger = get_logger("repair.frameworks")


@dataclass
class ValidationOutcome:
    """What the validator did to a file."""

    delete_file: bool = False
    pruned: int = 0
    orphan_type: Optional[str] = None


class FrameworkValidator:
    """Prunes members whose DocId is not indexed, or condemns the whole file.

    A declaration outside any ``Member`` belongs to the type itself; when that
    identifier is unknown the file is marked for deletion and nothing else is
    touched. Pruning a member also removes ancestors the prune left empty.
    """

    def __init__(self, identifiers: IdentifierSet) -> None:
        self.identifiers = identifiers

    def validate(self, root: etree._Element) -> ValidationOutcome:
        outcome = ValidationOutcome()
        emptied: List[etree._Element] = []

        for declaration, value in list(iter_docid_declarations(root)):
            if value in self.identifiers:
                continue

            unit = declaration if local_name(declaration) == "Member" else enclosing(declaration, "Member")
            if unit is None:
                logger.info("Type identifier %s is not in the index", value)
                outcome.delete_file = True
                outcome.orphan_type = value
                return outcome

            parent = remove_element(unit)
            if parent is None:
                # Already pruned through another declaration of the same member.
                continue
            logger.debug("Pruned member %s: not in the index", value)
            outcome.pruned += 1
            emptied.append(parent)

        for parent in emptied:
            self._remove_empty_ancestors(parent, root)
        return outcome

    @staticmethod
    def _remove_empty_ancestors(element: etree._Element, root: etree._Element) -> None:
        current: Optional[etree._Element] = element
        while current is not None and current is not root and is_empty(current):
            current = remove_element(current)


__all__ = ["FrameworkValidator", "ValidationOutcome"]
