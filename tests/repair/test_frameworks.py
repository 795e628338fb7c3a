"""Tests for validation against the framework index."""

from __future__ import annotations

from docdedupe.document import member_docid, parse_document
from docdedupe.repair import FrameworkValidator
from docdedupe.stores import IdentifierSet
from tests._fixtures.corpus_builder import member_xml, type_xml


def _root(type_id: str, *members: str):
    return parse_document(type_xml(type_id, members).encode("utf-8")).getroot()


def test_unknown_type_condemns_file() -> None:
    root = _root("T:Gone", member_xml("M:Gone.Bar"))
    validator = FrameworkValidator(IdentifierSet(["M:Gone.Bar"]))

    outcome = validator.validate(root)

    assert outcome.delete_file is True
    assert outcome.orphan_type == "T:Gone"
    assert len(root.findall("Members/Member")) == 1


def test_unknown_member_is_pruned_and_others_kept() -> None:
    root = _root("T:Foo", member_xml("M:Foo.A"), member_xml("M:Foo.Orphan"), member_xml("M:Foo.B"))
    validator = FrameworkValidator(IdentifierSet(["T:Foo", "M:Foo.A", "M:Foo.B"]))

    outcome = validator.validate(root)

    assert outcome.delete_file is False
    assert outcome.pruned == 1
    assert [member_docid(m) for m in root.findall("Members/Member")] == ["M:Foo.A", "M:Foo.B"]


def test_membership_is_case_insensitive() -> None:
    root = _root("T:FOO", member_xml("m:foo.bar"))

    outcome = FrameworkValidator(IdentifierSet(["t:foo", "M:Foo.Bar"])).validate(root)

    assert outcome.delete_file is False
    assert outcome.pruned == 0


def test_pruning_every_member_removes_empty_container() -> None:
    root = _root("T:Foo", member_xml("M:Foo.Orphan"))

    outcome = FrameworkValidator(IdentifierSet(["T:Foo"])).validate(root)

    assert outcome.pruned == 1
    assert root.find("Members") is None
    assert root.find("Docs/summary") is not None


def test_pre_existing_empty_elements_are_left_alone() -> None:
    root = parse_document(
        b'<Type><TypeSignature Language="DocId" Value="T:Foo" /><Docs><remarks /></Docs>'
        b'<Members><Member><MemberSignature Language="DocId" Value="M:Foo.Orphan" /></Member>'
        b'<Member><MemberSignature Language="DocId" Value="M:Foo.Bar" /></Member></Members></Type>'
    ).getroot()

    FrameworkValidator(IdentifierSet(["T:Foo", "M:Foo.Bar"])).validate(root)

    assert root.find("Docs/remarks") is not None
    assert len(root.findall("Members/Member")) == 1


def test_non_docid_declarations_are_ignored() -> None:
    root = parse_document(
        b'<Type><TypeSignature Language="C#" Value="public class Foo" />'
        b'<TypeSignature Language="DOCID" Value="T:Foo" /></Type>'
    ).getroot()

    outcome = FrameworkValidator(IdentifierSet(["T:Foo"])).validate(root)

    assert outcome.delete_file is False
    assert outcome.pruned == 0


def test_file_without_declarations_is_kept() -> None:
    root = parse_document(b"<Namespace Name='N'><Docs><summary>N.</summary></Docs></Namespace>").getroot()

    outcome = FrameworkValidator(IdentifierSet(["T:Foo"])).validate(root)

    assert outcome.delete_file is False
