import unittest

from tagtree.tokenizer import State, Tokenizer, TokenizerOpts, tokenize
from tagtree.tokens import ErrorLog, Token, TokenKind


def _tokenize_with_errors(text):
    errors = ErrorLog()
    tokenizer = Tokenizer(errors=errors)
    tokenizer.reset(text)
    return list(tokenizer), [error.message for error in errors]


class TestTokenizerBasics(unittest.TestCase):
    def test_empty_input_yields_only_eof(self):
        assert tokenize("") == [Token.eof()]

    def test_eof_is_repeated_after_end_of_input(self):
        tokenizer = Tokenizer()
        tokenizer.reset("x")
        assert tokenizer.next_token() == Token.text("x")
        assert tokenizer.next_token().kind == TokenKind.EOF
        assert tokenizer.next_token().kind == TokenKind.EOF

    def test_simple_element(self):
        start = Token.start_tag("div")
        start.attributes["class"] = "a"
        assert tokenize('<div class="a">hi</div>') == [
            start,
            Token.text("hi"),
            Token.end_tag("div"),
            Token.eof(),
        ]

    def test_tag_and_attribute_names_are_lowercased(self):
        tokens = tokenize("<DIV ID=Main DaTa-X='Y'></Div>")
        assert tokens[0].name == "div"
        assert tokens[0].attributes == {"id": "Main", "data-x": "Y"}
        assert tokens[1] == Token.end_tag("div")

    def test_text_is_not_merged_across_lt(self):
        tokens, errors = _tokenize_with_errors("a < b")
        assert tokens == [Token.text("a "), Token.text("<"), Token.text(" b"), Token.eof()]
        assert errors == ["Invalid first character of tag name"]

    def test_self_closing_flag(self):
        tokens = tokenize("<br/><div />")
        assert tokens[0].name == "br"
        assert tokens[0].self_closing is True
        assert tokens[1].name == "div"
        assert tokens[1].self_closing is True

    def test_slash_not_followed_by_gt_is_an_error(self):
        tokens, errors = _tokenize_with_errors("<a / b>")
        assert tokens[0].attributes == {"b": ""}
        assert tokens[0].self_closing is False
        assert errors == ["Unexpected character after '/' in tag"]

    def test_repr_forms(self):
        start = Token.start_tag("img")
        start.attributes["src"] = "a.png"
        start.self_closing = True
        assert repr(start) == "<start:img src='a.png' />"
        assert repr(Token.end_tag("p")) == "<end:p>"
        assert repr(Token.text("x")) == "Text('x')"
        assert repr(Token.doctype("html", force_quirks=True)) == "Doctype('html', force_quirks)"
        assert repr(Token.eof()) == "EOF"


class TestAttributes(unittest.TestCase):
    def test_valueless_attribute_gets_empty_string(self):
        tokens = tokenize("<input disabled>")
        assert tokens[0].attributes == {"disabled": ""}

    def test_whitespace_around_equals(self):
        tokens = tokenize('<a b = "v" c>')
        assert tokens[0].attributes == {"b": "v", "c": ""}

    def test_duplicate_attribute_keeps_first_value(self):
        tokens, errors = _tokenize_with_errors("<a x=1 x=2>")
        assert tokens[0].attributes == {"x": "1"}
        assert errors == ["Duplicate attribute: x"]

    def test_equals_starts_attribute_name(self):
        tokens, errors = _tokenize_with_errors("<a =x>")
        assert tokens[0].attributes == {"=x": ""}
        assert errors == ["Attribute name cannot start with '='"]

    def test_missing_whitespace_between_attributes(self):
        tokens, errors = _tokenize_with_errors('<a href="x"title="y">')
        assert tokens[0].attributes == {"href": "x", "title": "y"}
        assert errors == ["Missing whitespace between attributes"]

    def test_missing_attribute_value(self):
        tokens, errors = _tokenize_with_errors("<a href=>")
        assert tokens[0].name == "a"
        assert tokens[0].attributes == {"href": ""}
        assert errors == ["Missing attribute value"]

    def test_invalid_characters_in_unquoted_value_are_kept(self):
        tokens, errors = _tokenize_with_errors("<a x=a`b>")
        assert tokens[0].attributes == {"x": "a`b"}
        assert errors == ["Invalid character in unquoted attribute value"]

    def test_quoted_values_keep_case_and_markup(self):
        tokens = tokenize("<a title='<B> \"x\"'>")
        assert tokens[0].attributes == {"title": '<B> "x"'}


class TestComments(unittest.TestCase):
    def test_inner_dashes_are_returned_to_data(self):
        assert tokenize("<!-- a -- b -->")[0] == Token.comment(" a -- b ")

    def test_empty_comment(self):
        tokens, errors = _tokenize_with_errors("<!---->")
        assert tokens[0] == Token.comment("")
        assert errors == []

    def test_abrupt_comment_end(self):
        for text in ("<!-->", "<!--->"):
            tokens, errors = _tokenize_with_errors(text)
            assert tokens[0] == Token.comment("")
            assert errors == ["Abrupt comment end"]

    def test_comment_ended_with_bang(self):
        tokens, errors = _tokenize_with_errors("<!--x--!>")
        assert tokens[0] == Token.comment("x")
        assert errors == ["Comment ended with --!>"]

    def test_eof_in_comment_emits_collected_data(self):
        tokens, errors = _tokenize_with_errors("<!--abc")
        assert tokens == [Token.comment("abc"), Token.eof()]
        assert errors == ["EOF in comment"]

    def test_processing_instruction_becomes_bogus_comment(self):
        tokens, errors = _tokenize_with_errors('<?xml version="1.0"?>')
        assert tokens[0] == Token.comment('xml version="1.0"?')
        assert errors == ["Unexpected '?' at tag open (processing instruction)"]

    def test_unknown_markup_declaration(self):
        tokens, errors = _tokenize_with_errors("<![CDATA[x]]>")
        assert tokens[0] == Token.comment("[CDATA[x]]")
        assert errors == ["Invalid markup declaration"]

    def test_invalid_end_tag_becomes_bogus_comment(self):
        tokens, errors = _tokenize_with_errors("</1>")
        assert tokens[0] == Token.comment("1")
        assert errors == ["Invalid character after </"]


class TestDoctype(unittest.TestCase):
    def test_doctype_name(self):
        tokens, errors = _tokenize_with_errors("<!DOCTYPE HTML>")
        assert tokens[0] == Token.doctype("html")
        assert errors == []

    def test_identifiers_are_skipped(self):
        tokens, errors = _tokenize_with_errors('<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01//EN">x')
        assert tokens == [Token.doctype("html"), Token.text("x"), Token.eof()]
        assert errors == []

    def test_lowercase_keyword_is_a_bogus_comment(self):
        tokens, errors = _tokenize_with_errors("<!doctype html>")
        assert tokens[0] == Token.comment("doctype html")
        assert errors == ["Invalid markup declaration"]

    def test_missing_name_forces_quirks(self):
        tokens, errors = _tokenize_with_errors("<!DOCTYPE>")
        assert tokens[0] == Token.doctype("", force_quirks=True)
        assert errors == ["Missing whitespace before DOCTYPE name", "Missing DOCTYPE name"]

    def test_eof_in_doctype_name(self):
        tokens, errors = _tokenize_with_errors("<!DOCTYPE ht")
        assert tokens[0] == Token.doctype("ht", force_quirks=True)
        assert errors == ["EOF in DOCTYPE name"]


class TestEndOfInput(unittest.TestCase):
    def test_lone_lt_is_text(self):
        tokens, errors = _tokenize_with_errors("<")
        assert tokens == [Token.text("<"), Token.eof()]
        assert errors == ["EOF after <"]

    def test_lone_end_tag_open_is_text(self):
        tokens, errors = _tokenize_with_errors("</")
        assert tokens == [Token.text("</"), Token.eof()]
        assert errors == ["EOF after </"]

    def test_empty_end_tag_is_dropped(self):
        tokens, errors = _tokenize_with_errors("</>")
        assert tokens == [Token.eof()]
        assert errors == ["Empty end tag"]

    def test_partial_tag_is_discarded(self):
        tokens, errors = _tokenize_with_errors('hello <div class="a')
        assert tokens == [Token.text("hello "), Token.eof()]
        assert errors == ["EOF in attribute value"]

    def test_eof_in_every_tag_state_terminates(self):
        for text in ("<d", "<d ", "<d a", "<d a ", "<d a=", "<d a='", '<d a="', "<d a=b", "<d a='b'", "<d /", "</d"):
            tokens, errors = _tokenize_with_errors(text)
            assert tokens == [Token.eof()], text
            assert len(errors) == 1, text


class TestCursor(unittest.TestCase):
    def test_reconsume_serves_character_once(self):
        tokenizer = Tokenizer()
        tokenizer.reset("ab")
        assert tokenizer._get_char() == "a"
        tokenizer._reconsume_current()
        assert tokenizer._get_char() == "a"
        assert tokenizer._get_char() == "b"
        assert tokenizer._get_char() is None

    def test_reset_clears_state(self):
        tokenizer = Tokenizer()
        tokenizer.reset("<div cla")
        tokenizer.next_token()
        tokenizer.reset("x")
        assert tokenizer.state == State.DATA
        assert tokenizer.pos == 0
        assert list(tokenizer) == [Token.text("x"), Token.eof()]

    def test_bom_is_discarded_by_default(self):
        assert tokenize("\ufeffx") == [Token.text("x"), Token.eof()]
        assert tokenize("\ufeffx", TokenizerOpts(discard_bom=False)) == [Token.text("\ufeffx"), Token.eof()]

    def test_error_offsets(self):
        errors = ErrorLog()
        tokenizer = Tokenizer(errors=errors)
        tokenizer.reset("<p>\n<a x=1 x=2>")
        list(tokenizer)
        error = errors.errors[0]
        assert error.offset == 14
        assert error.line == 2
        assert error.column == 11
        assert str(error) == "Error at position 14: Duplicate attribute: x"

    def test_same_input_same_tokens(self):
        text = "<!DOCTYPE html><p class=a>x<br>y</p><!--c-->"
        assert tokenize(text) == tokenize(text)

    def test_initial_state_option(self):
        opts = TokenizerOpts(initial_state=State.COMMENT)
        assert tokenize("abc-->x", opts) == [Token.comment("abc"), Token.text("x"), Token.eof()]

    def test_initial_tag_name_state_builds_a_start_tag(self):
        opts = TokenizerOpts(initial_state=State.TAG_NAME)
        assert tokenize("a>", opts) == [Token.start_tag("a"), Token.eof()]

    def test_tag_without_a_name_is_dropped(self):
        errors = ErrorLog()
        tokenizer = Tokenizer(TokenizerOpts(initial_state=State.SELF_CLOSING_START_TAG), errors)
        tokenizer.reset(">x")
        assert list(tokenizer) == [Token.text("x"), Token.eof()]
        assert [error.message for error in errors] == ["Missing tag name"]

    def test_every_initial_state_terminates(self):
        for state in State:
            opts = TokenizerOpts(initial_state=state)
            for text in ("", "a>", "a/>", "a b='c' d=e/>x<!--y-->", "-->z"):
                tokens = tokenize(text, opts)
                assert tokens[-1].kind == TokenKind.EOF, (state, text)
                assert all(token.name for token in tokens if token.is_tag), (state, text)
