"""Shared types for the per-file repair stages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from lxml import etree

_WHITESPACE = re.compile(r"\s+")


class PolicyError(RuntimeError):
    """Raised when a losing-element policy does not leave exactly one survivor."""


@dataclass(frozen=True)
class MemberEntry:
    """A ``Member`` captured at grouping time.

    ``element`` is the live node in the parsed tree, so removal never has to
    re-locate it; ``position`` is its index among the file's members.
    """

    position: int
    identifier: Optional[str]
    element: etree._Element


def normalize_whitespace(text: str) -> str:
    """Trim ``text`` and collapse every whitespace run to a single space."""
    return _WHITESPACE.sub(" ", text).strip()
