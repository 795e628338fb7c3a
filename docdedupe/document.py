"""Load, inspect and rewrite documentation XML files."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Optional

from lxml import etree

DOCID_LANGUAGE = "docid"


def _make_parser() -> etree.XMLParser:
    # Parsers are not shared between threads.
    return etree.XMLParser(
        remove_blank_text=False,
        remove_comments=False,
        resolve_entities=False,
        no_network=True,
    )


def load_document(path: Path) -> etree._ElementTree:
    """Parse ``path`` and drop indentation-only whitespace.

    Whitespace inside mixed content is kept; only the newline-bearing runs that
    sit between child elements of element-only containers are discarded so the
    serializer can lay the tree out again.
    """
    tree = etree.parse(str(path), _make_parser())
    strip_indentation(tree.getroot())
    return tree


def parse_document(payload: bytes) -> etree._ElementTree:
    """Parse an in-memory document the same way :func:`load_document` does."""
    root = etree.fromstring(payload, _make_parser())
    strip_indentation(root)
    return root.getroottree()


def strip_indentation(root: etree._Element) -> None:
    for element in root.iter():
        if len(element) == 0:
            continue
        pieces = [element.text] + [child.tail for child in element]
        if all(_is_indentation(piece) for piece in pieces):
            element.text = None
            for child in element:
                child.tail = None


def _is_indentation(text: Optional[str]) -> bool:
    return text is None or (not text.strip() and "\n" in text)


def serialize_document(tree: etree._ElementTree) -> bytes:
    """Render ``tree`` as UTF-8 without declaration, two-space indented, LF-terminated."""
    payload = etree.tostring(
        tree,
        encoding="utf-8",
        xml_declaration=False,
        pretty_print=True,
    )
    return payload.replace(b"\r\n", b"\n").rstrip(b"\n") + b"\n"


def write_document(path: Path, payload: bytes) -> None:
    """Atomically replace ``path`` with ``payload``.

    The new content is written to a sibling temporary file and moved over the
    original only once it is complete, so a failed write never truncates it.
    """
    handle = tempfile.NamedTemporaryFile(
        "wb",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    tmp_path = Path(handle.name)
    try:
        with handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


# ----------------------------------------------------------------------
# Tree helpers


def local_name(element: etree._Element) -> Optional[str]:
    """Return the tag without namespace, or ``None`` for comments and PIs."""
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def child_elements(parent: etree._Element, name: Optional[str] = None) -> Iterator[etree._Element]:
    for child in parent:
        tag = local_name(child)
        if tag is None:
            continue
        if name is None or tag == name:
            yield child


def first_child(parent: etree._Element, name: str) -> Optional[etree._Element]:
    return next(child_elements(parent, name), None)


def docid_value(element: etree._Element) -> Optional[str]:
    """Return the ``Value`` of a ``Language="DocId"`` declaration, else ``None``."""
    language = element.get("Language")
    if language is None or language.strip().lower() != DOCID_LANGUAGE:
        return None
    value = element.get("Value")
    if value is None or not value.strip():
        return None
    return value


def iter_docid_declarations(root: etree._Element) -> Iterator[tuple[etree._Element, str]]:
    for element in root.iter():
        if local_name(element) is None:
            continue
        value = docid_value(element)
        if value is not None:
            yield element, value


def member_docid(member: etree._Element) -> Optional[str]:
    """Return the stable identifier of a ``Member`` element, if it declares one."""
    for signature in child_elements(member, "MemberSignature"):
        value = docid_value(signature)
        if value is not None:
            return value
    return None


def enclosing(element: etree._Element, name: str) -> Optional[etree._Element]:
    """Return the nearest ancestor named ``name``."""
    for ancestor in element.iterancestors():
        if local_name(ancestor) == name:
            return ancestor
    return None


def remove_element(element: etree._Element) -> Optional[etree._Element]:
    """Detach ``element`` from its parent, keeping any text that trailed it.

    Returns the former parent, or ``None`` when the element was already detached.
    """
    parent = element.getparent()
    if parent is None:
        return None
    tail = element.tail
    if tail and tail.strip():
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)
    return parent


def is_empty(element: etree._Element) -> bool:
    return len(element) == 0 and not element.attrib and not (element.text or "").strip()


def text_content(element: etree._Element) -> str:
    return "".join(element.itertext())


__all__ = [
    "child_elements",
    "docid_value",
    "enclosing",
    "first_child",
    "is_empty",
    "iter_docid_declarations",
    "load_document",
    "local_name",
    "member_docid",
    "parse_document",
    "remove_element",
    "serialize_document",
    "strip_indentation",
    "text_content",
    "write_document",
]
