"""Minimal selector engine used by the node lookups and fragment parsing.

Supported syntax is a comma separated list of compound selectors, each made
of an optional type selector (or ``*``) followed by any number of ``#id``,
``.class``, ``[attr]`` and ``[attr=value]`` parts. Combinators and pseudo
classes are not supported and raise SelectorError.
"""

import re

from .constants import ASCII_LOWER_TABLE
from .node import NodeType

_IDENT = r"-?[A-Za-z_][\w-]*"

_TOKEN_PATTERN = re.compile(
    rf"""
    (?P<type>{_IDENT}|\*)
    | \#(?P<id>[\w-]+)
    | \.(?P<cls>{_IDENT})
    | \[\s*(?P<attr>[^\s\]=~|^$*"']+)\s*
        (?:=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s\]"']+))\s*)?
      \]
    """,
    re.VERBOSE,
)


class SelectorError(ValueError):
    """Raised for an empty or unsupported selector."""

    def __init__(self, message, selector=None):
        self.selector = selector
        super().__init__(message)


class CompoundSelector:
    __slots__ = ("attributes", "classes", "element_id", "tag_name")

    def __init__(self):
        self.tag_name = None
        self.element_id = None
        self.classes = []
        # (name, value) pairs; value None means presence only
        self.attributes = []

    def matches(self, node):
        if node.node_type != NodeType.ELEMENT:
            return False
        if self.tag_name is not None and node.tag_name != self.tag_name:
            return False
        attributes = node.attributes
        if self.element_id is not None and attributes.get("id") != self.element_id:
            return False
        if self.classes:
            class_list = node.class_list
            for name in self.classes:
                if name not in class_list:
                    return False
        for name, value in self.attributes:
            if name not in attributes:
                return False
            if value is not None and attributes[name] != value:
                return False
        return True

    def __repr__(self):
        return (
            f"CompoundSelector(tag_name={self.tag_name!r}, element_id={self.element_id!r}, "
            f"classes={self.classes!r}, attributes={self.attributes!r})"
        )


def parse_selector(selector):
    """Parse ``selector`` into a list of CompoundSelector alternatives."""
    if not isinstance(selector, str) or not selector.strip():
        raise SelectorError("Empty selector", selector)

    compounds = []
    for part in selector.split(","):
        text = part.strip()
        if not text:
            raise SelectorError(f"Empty selector in list: {selector!r}", selector)
        compounds.append(_parse_compound(text, selector))
    return compounds


def _parse_compound(text, selector):
    compound = CompoundSelector()
    pos = 0
    length = len(text)
    while pos < length:
        match = _TOKEN_PATTERN.match(text, pos)
        if match is None:
            raise SelectorError(f"Unsupported selector syntax at {text[pos:]!r}", selector)
        if match.group("type") is not None:
            if pos != 0:
                raise SelectorError(f"Type selector must come first: {text!r}", selector)
            type_name = match.group("type")
            if type_name != "*":
                compound.tag_name = type_name.translate(ASCII_LOWER_TABLE)
        elif match.group("id") is not None:
            compound.element_id = match.group("id")
        elif match.group("cls") is not None:
            compound.classes.append(match.group("cls"))
        else:
            value = match.group("dq")
            if value is None:
                value = match.group("sq")
            if value is None:
                value = match.group("bare")
            compound.attributes.append((match.group("attr").translate(ASCII_LOWER_TABLE), value))
        pos = match.end()
    return compound


def matches(node, selector):
    compounds = parse_selector(selector)
    return any(compound.matches(node) for compound in compounds)


def query_all(root, selector):
    """Return all descendants of ``root`` matching ``selector``, in document order.

    ``root`` itself is never part of the result.
    """
    compounds = parse_selector(selector)
    return [node for node in root.iter_descendants() if any(compound.matches(node) for compound in compounds)]


def query(root, selector):
    compounds = parse_selector(selector)
    for node in root.iter_descendants():
        for compound in compounds:
            if compound.matches(node):
                return node
    return None
