"""HTML serialization utilities for tagtree nodes."""

from .constants import SELF_CLOSING_TAGS
from .node import NodeType


def _escape_text(text):
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value):
    return value.replace("&", "&amp;").replace('"', "&quot;")


def serialize_start_tag(name, attributes):
    parts = ["<", name]
    for key, value in attributes.items():
        if value is None or value == "":
            parts.extend([" ", key])
        else:
            parts.extend([" ", key, '="', _escape_attr_value(value), '"'])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name):
    return f"</{name}>"


def to_html(node, indent=0, indent_size=2, *, pretty=True):
    """Convert node to HTML string, pretty-printed unless ``pretty`` is False."""
    if node.node_type == NodeType.DOCUMENT:
        # Document root - just render children
        parts = []
        for child in node.children:
            child_html = _node_to_html(child, indent, indent_size, pretty)
            if child_html:
                parts.append(child_html)
        return "\n".join(parts) if pretty else "".join(parts)
    return _node_to_html(node, indent, indent_size, pretty)


def _node_to_html(node, indent, indent_size, pretty):
    prefix = " " * (indent * indent_size) if pretty else ""
    node_type = node.node_type

    if node_type == NodeType.TEXT:
        if pretty:
            text = node.data.strip()
            return f"{prefix}{_escape_text(text)}" if text else ""
        return _escape_text(node.data)

    if node_type == NodeType.COMMENT:
        return f"{prefix}<!--{node.data}-->"

    if node_type == NodeType.DOCUMENT_TYPE:
        return f"{prefix}{_doctype_to_html(node)}"

    name = node.name
    open_tag = serialize_start_tag(name, node.attributes)
    children = node.children

    if name in SELF_CLOSING_TAGS and not children:
        return f"{prefix}{open_tag}"

    if not children:
        return f"{prefix}{open_tag}{serialize_end_tag(name)}"

    if not pretty:
        inner = "".join(_node_to_html(child, 0, indent_size, False) for child in children)
        return f"{open_tag}{inner}{serialize_end_tag(name)}"

    # Text-only content stays on the tag's line
    if all(child.node_type == NodeType.TEXT for child in children):
        text = "".join(child.data for child in children)
        return f"{prefix}{open_tag}{_escape_text(text)}{serialize_end_tag(name)}"

    parts = [f"{prefix}{open_tag}"]
    for child in children:
        child_html = _node_to_html(child, indent + 1, indent_size, True)
        if child_html:
            parts.append(child_html)
    parts.append(f"{prefix}{serialize_end_tag(name)}")
    return "\n".join(parts)


def _doctype_to_html(node):
    parts = ["<!DOCTYPE"]
    if node.name:
        parts.append(f" {node.name}")
    if node.public_id:
        parts.append(f' PUBLIC "{node.public_id}"')
        if node.system_id:
            parts.append(f' "{node.system_id}"')
    elif node.system_id:
        parts.append(f' SYSTEM "{node.system_id}"')
    parts.append(">")
    return "".join(parts)


def to_test_format(node, indent=0):
    """Convert node to html5lib test format string.

    This format is used by html5lib-tests for validating parser output.
    Uses '| ' prefixes and specific indentation rules.
    """
    if node.node_type == NodeType.DOCUMENT:
        return "\n".join(_node_to_test_format(child, 0) for child in node.children)
    return _node_to_test_format(node, indent)


def _node_to_test_format(node, indent):
    node_type = node.node_type
    padding = " " * indent

    if node_type == NodeType.COMMENT:
        return f"| {padding}<!-- {node.data} -->"

    if node_type == NodeType.DOCUMENT_TYPE:
        return _doctype_to_test_format(node)

    if node_type == NodeType.TEXT:
        return f'| {padding}"{node.data}"'

    lines = [f"| {padding}<{node.name}>"]
    # Sort by name for canonical test output
    for name, value in sorted(node.attributes.items()):
        lines.append(f'| {padding}  {name}="{value}"')
    lines.extend(_node_to_test_format(child, indent + 2) for child in node.children)
    return "\n".join(lines)


def _doctype_to_test_format(node):
    parts = ["| <!DOCTYPE"]
    if node.name:
        parts.append(f" {node.name}")
    else:
        parts.append(" ")

    if node.public_id or node.system_id:
        parts.append(f' "{node.public_id}"')
        parts.append(f' "{node.system_id}"')

    parts.append(">")
    return "".join(parts)
