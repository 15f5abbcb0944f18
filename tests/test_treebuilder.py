import unittest

from tagtree.node import NodeType
from tagtree.tokens import ErrorLog, Token
from tagtree.treebuilder import TreeBuilder


class TestTreeBuilder(unittest.TestCase):
    def setUp(self):
        self.errors = ErrorLog()
        self.builder = TreeBuilder(self.errors)

    def feed(self, *tokens):
        for token in tokens:
            self.builder.process_token(token)
        self.builder.process_token(Token.eof())
        return self.builder.finish()

    def test_reset_seeds_html_and_head(self):
        document = self.builder.finish()
        html = document.document_element
        assert html.tag_name == "html"
        assert [child.tag_name for child in html.children] == ["head"]
        assert [node.tag_name for node in self.builder.open_elements] == ["html", "head"]
        assert self.builder.current_node is html.children[0]

    def test_start_tag_nests_and_copies_attributes(self):
        start = Token.start_tag("a")
        start.attributes.update({"href": "x", "title": "t"})
        document = self.feed(start, Token.text("link"))
        a = document.head.first_element_child
        assert a.tag_name == "a"
        assert list(a.attributes.items()) == [("href", "x"), ("title", "t")]
        assert a.text_content == "link"
        assert self.builder.open_elements[-1] is a

    def test_self_closing_elements_are_not_pushed(self):
        p = Token.start_tag("p")
        custom = Token.start_tag("x-widget")
        custom.self_closing = True
        document = self.feed(p, Token.text("a"), Token.start_tag("br"), custom, Token.text("b"))
        p_element = document.head.first_element_child
        assert [child.name for child in p_element.children] == ["#text", "br", "x-widget", "#text"]
        assert self.builder.open_elements[-1] is p_element

    def test_matching_end_tag_pops(self):
        self.feed(Token.start_tag("div"), Token.end_tag("div"))
        assert [node.tag_name for node in self.builder.open_elements] == ["html", "head"]
        assert len(self.errors) == 0

    def test_mismatched_end_tag_pops_through_match(self):
        self.feed(Token.start_tag("div"), Token.start_tag("span"), Token.end_tag("div"))
        assert [node.tag_name for node in self.builder.open_elements] == ["html", "head"]
        assert [error.message for error in self.errors] == ["Mismatched tags, expected: span, got: div"]

    def test_unmatched_end_tag_leaves_stack(self):
        self.feed(Token.start_tag("div"), Token.end_tag("span"))
        assert [node.tag_name for node in self.builder.open_elements] == ["html", "head", "div"]
        assert [error.message for error in self.errors] == ["End tag without matching start tag: span"]

    def test_body_end_tag_closes_implicitly(self):
        self.feed(Token.start_tag("body"), Token.start_tag("div"), Token.end_tag("body"))
        assert [node.tag_name for node in self.builder.open_elements] == ["html", "head"]
        assert len(self.errors) == 0

    def test_unmatched_body_end_tag(self):
        self.feed(Token.end_tag("body"))
        assert [node.tag_name for node in self.builder.open_elements] == ["html", "head"]
        assert [error.message for error in self.errors] == ["End tag without matching start tag: body"]

    def test_content_after_html_end_goes_to_document(self):
        document = self.feed(Token.end_tag("html"), Token.text("x"))
        assert self.builder.open_elements == []
        assert document.children[-1].node_type == NodeType.TEXT
        assert document.children[-1].data == "x"

    def test_adjacent_text_is_merged(self):
        document = self.feed(Token.text("a"), Token.text("<"), Token.text(">b"))
        head = document.head
        assert len(head.children) == 1
        assert head.children[0].data == "a<>b"

    def test_empty_text_is_dropped(self):
        document = self.feed(Token.text(""))
        assert document.head.children == []

    def test_comment_and_doctype(self):
        document = self.feed(Token.doctype("html"), Token.comment(" c "))
        assert document.doctype.name == "html"
        assert document.head.children[0].node_type == NodeType.COMMENT
        assert document.head.children[0].data == " c "

    def test_error_offset_comes_from_caller(self):
        self.builder.process_token(Token.end_tag("p"), 7)
        assert self.errors.errors[0].offset == 7

    def test_reset_starts_fresh_document(self):
        first = self.feed(Token.start_tag("div"))
        self.builder.reset()
        second = self.builder.finish()
        assert first is not second
        assert second.head.children == []
        assert len(self.builder.open_elements) == 2
