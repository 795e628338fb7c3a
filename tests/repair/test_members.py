"""Tests for duplicate member collapsing."""

from __future__ import annotations

from typing import List, Sequence

import pytest

from docdedupe.document import member_docid, parse_document
from docdedupe.repair import (
    KeepFirstPolicy,
    KeepLastPolicy,
    LosingElementPolicy,
    MemberDeduplicator,
    MemberEntry,
    PolicyError,
)
from tests._fixtures.corpus_builder import member_xml, type_xml


def _root(*members: str):
    return parse_document(type_xml("T:Foo", members).encode("utf-8")).getroot()


def _members(root) -> List:
    return root.findall("Members/Member")


def test_duplicate_members_collapse_to_one() -> None:
    root = _root(member_xml("M:Foo.Bar"), member_xml("M:Foo.Bar"), member_xml("M:Foo.Baz"))

    removed = MemberDeduplicator().deduplicate(root)

    assert removed == 1
    assert [member_docid(member) for member in _members(root)] == ["M:Foo.Bar", "M:Foo.Baz"]


def test_k_duplicates_leave_exactly_one() -> None:
    root = _root(*(member_xml("M:Foo.Bar", Index=str(i)) for i in range(5)))

    removed = MemberDeduplicator(KeepFirstPolicy()).deduplicate(root)

    assert removed == 4
    assert [member.get("Index") for member in _members(root)] == ["0"]


@pytest.mark.parametrize(("policy", "survivor"), [(KeepFirstPolicy(), "0"), (KeepLastPolicy(), "2")])
def test_survivor_matches_policy(policy: LosingElementPolicy, survivor: str) -> None:
    root = _root(*(member_xml("M:Foo.Bar", Index=str(i)) for i in range(3)))

    MemberDeduplicator(policy).deduplicate(root)

    assert [member.get("Index") for member in _members(root)] == [survivor]


def test_default_policy_keeps_best_documented_member() -> None:
    root = _root(
        member_xml("M:Foo.Bar", Index="0"),
        member_xml("M:Foo.Bar", docs="<summary>Does bar.</summary><returns>A value.</returns>", Index="1"),
        member_xml("M:Foo.Bar", docs="<summary>Does bar.</summary>", Index="2"),
    )

    MemberDeduplicator().deduplicate(root)

    assert [member.get("Index") for member in _members(root)] == ["1"]


def test_members_without_identifier_are_never_merged() -> None:
    root = _root(member_xml(None, Index="0"), member_xml(None, Index="1"))

    removed = MemberDeduplicator().deduplicate(root)

    assert removed == 0
    assert len(_members(root)) == 2


def test_signature_language_is_case_insensitive() -> None:
    root = _root(
        '<Member><MemberSignature Language="docid" Value="M:Foo.Bar" /></Member>',
        '<Member><MemberSignature Language="DocId" Value="M:Foo.Bar" /></Member>',
    )

    assert MemberDeduplicator().deduplicate(root) == 1


def test_document_without_members_is_left_alone() -> None:
    root = parse_document(b'<Type><TypeSignature Language="DocId" Value="T:Foo" /></Type>').getroot()

    assert MemberDeduplicator().deduplicate(root) == 0


class _KeepNonePolicy(LosingElementPolicy):
    name = "keep-none"

    def select_losers(self, entries: Sequence[MemberEntry]) -> List[MemberEntry]:
        return list(entries)


def test_policy_must_leave_one_survivor() -> None:
    root = _root(member_xml("M:Foo.Bar"), member_xml("M:Foo.Bar"))

    with pytest.raises(PolicyError, match="0 survivors"):
        MemberDeduplicator(_KeepNonePolicy()).deduplicate(root)

    assert len(_members(root)) == 2


def test_collect_records_document_positions() -> None:
    root = _root(member_xml("M:Foo.A"), member_xml(None), member_xml("M:Foo.B"))

    entries = MemberDeduplicator().collect(root)

    assert [(entry.position, entry.identifier) for entry in entries] == [
        (0, "M:Foo.A"),
        (1, None),
        (2, "M:Foo.B"),
    ]
