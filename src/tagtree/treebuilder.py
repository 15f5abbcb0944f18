import logging

from .constants import ROOT_END_TAGS, SELF_CLOSING_TAGS
from .node import Comment, Document, DocumentType, Element, NodeType, Text
from .tokens import ErrorLog

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Build a Document from a token stream with a stack of open elements.

    There is a single insertion mode: start tags nest under the current node,
    end tags close the nearest matching open element, and everything else is
    appended where the stack points. The stack starts out holding the implied
    ``html`` and ``head`` elements.
    """

    __slots__ = ("document", "errors", "offset", "open_elements")

    def __init__(self, errors=None):
        self.errors = errors if errors is not None else ErrorLog()
        self.offset = None
        self.reset()

    def reset(self):
        self.document = Document()
        self.open_elements = []
        self.offset = None

        html = self.document.append_child(Element("html"))
        self.open_elements.append(html)
        head = html.append_child(Element("head"))
        self.open_elements.append(head)

    @property
    def current_node(self):
        if self.open_elements:
            return self.open_elements[-1]
        return self.document

    def process_token(self, token, offset=None):
        self.offset = offset
        self._TOKEN_HANDLERS[token.kind](self, token)

    def finish(self):
        return self.document

    def _parse_error(self, message):
        self.errors(message, self.offset)

    def _pop_until_inclusive(self, index):
        del self.open_elements[index:]

    def _find_open_element(self, name):
        open_elements = self.open_elements
        for index in range(len(open_elements) - 1, -1, -1):
            if open_elements[index].name == name:
                return index
        return -1

    # Token handlers ---------------------------------------------------------

    def _handle_doctype(self, token):
        self.document.append_child(DocumentType(token.name))

    def _handle_start_tag(self, token):
        element = Element(token.name, token.attributes)
        self.current_node.append_child(element)

        if token.self_closing or token.name in SELF_CLOSING_TAGS:
            return
        self.open_elements.append(element)

    def _handle_end_tag(self, token):
        name = token.name
        open_elements = self.open_elements

        if name in ROOT_END_TAGS:
            index = self._find_open_element(name)
            if index == -1:
                self._parse_error(f"End tag without matching start tag: {name}")
                return
            self._pop_until_inclusive(index)
            return

        if open_elements and open_elements[-1].name == name:
            open_elements.pop()
            return

        index = self._find_open_element(name)
        if index == -1:
            self._parse_error(f"End tag without matching start tag: {name}")
            return

        self._parse_error(f"Mismatched tags, expected: {open_elements[-1].name}, got: {name}")
        self._pop_until_inclusive(index)

    def _handle_comment(self, token):
        self.current_node.append_child(Comment(token.data))

    def _handle_text(self, token):
        data = token.data
        if not data:
            return
        parent = self.current_node
        children = parent.children
        if children and children[-1].node_type == NodeType.TEXT:
            children[-1].append_data(data)
            return
        parent.append_child(Text(data))

    def _handle_eof(self, token):
        if len(self.open_elements) > 2:
            logger.debug(f"EOF with {len(self.open_elements)} open elements")

    _TOKEN_HANDLERS = [
        _handle_doctype,
        _handle_start_tag,
        _handle_end_tag,
        _handle_comment,
        _handle_text,
        _handle_eof,
    ]
