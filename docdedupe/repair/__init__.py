"""Per-file repair stages."""

from .base import MemberEntry, PolicyError, normalize_whitespace
from .content import ContentDeduplicator
from .frameworks import FrameworkValidator, ValidationOutcome
from .members import MemberDeduplicator
from .policies import (
    KeepFirstPolicy,
    KeepLastPolicy,
    KeepMostCompletePolicy,
    LosingElementPolicy,
    available_policies,
    resolve_policy,
)

__all__ = [
    "ContentDeduplicator",
    "FrameworkValidator",
    "KeepFirstPolicy",
    "KeepLastPolicy",
    "KeepMostCompletePolicy",
    "LosingElementPolicy",
    "MemberDeduplicator",
    "MemberEntry",
    "PolicyError",
    "ValidationOutcome",
    "available_policies",
    "normalize_whitespace",
    "resolve_policy",
]
