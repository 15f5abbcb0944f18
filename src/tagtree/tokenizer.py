import enum
import logging
import re

from .constants import ASCII_LETTERS, ASCII_LOWER_TABLE, ATTRIBUTE_NAME_ERROR_CHARS, UNQUOTED_VALUE_ERROR_CHARS, WHITESPACE
from .tokens import ErrorLog, Token, TokenKind

logger = logging.getLogger(__name__)


_TAG_NAME_TERMINATORS = "\t\n\x0b\x0c\r />"
_ATTR_NAME_TERMINATORS = "\t\n\x0b\x0c\r />=\"'<"
_ATTR_VALUE_UNQUOTED_TERMINATORS = "\t\n\x0b\x0c\r >\"'<=`"

_TAG_NAME_PATTERN = re.compile(f"[{re.escape(_TAG_NAME_TERMINATORS)}]")
_ATTR_NAME_PATTERN = re.compile(f"[{re.escape(_ATTR_NAME_TERMINATORS)}]")
_ATTR_VALUE_DOUBLE_PATTERN = re.compile('"')
_ATTR_VALUE_SINGLE_PATTERN = re.compile("'")
_ATTR_VALUE_UNQUOTED_PATTERN = re.compile(f"[{re.escape(_ATTR_VALUE_UNQUOTED_TERMINATORS)}]")
_COMMENT_PATTERN = re.compile("-")
_BOGUS_COMMENT_PATTERN = re.compile(">")


class State(enum.IntEnum):
    DATA = 0
    TAG_OPEN = 1
    END_TAG_OPEN = 2
    TAG_NAME = 3
    BEFORE_ATTRIBUTE_NAME = 4
    ATTRIBUTE_NAME = 5
    AFTER_ATTRIBUTE_NAME = 6
    BEFORE_ATTRIBUTE_VALUE = 7
    ATTRIBUTE_VALUE_DOUBLE_QUOTED = 8
    ATTRIBUTE_VALUE_SINGLE_QUOTED = 9
    ATTRIBUTE_VALUE_UNQUOTED = 10
    AFTER_ATTRIBUTE_VALUE_QUOTED = 11
    SELF_CLOSING_START_TAG = 12
    BOGUS_COMMENT = 13
    MARKUP_DECLARATION_OPEN = 14
    COMMENT_START = 15
    COMMENT_START_DASH = 16
    COMMENT = 17
    COMMENT_END_DASH = 18
    COMMENT_END = 19
    COMMENT_END_BANG = 20
    DOCTYPE = 21
    BEFORE_DOCTYPE_NAME = 22
    DOCTYPE_NAME = 23
    AFTER_DOCTYPE_NAME = 24
    BOGUS_DOCTYPE = 25


# States that build a tag token; starting in one of them opens an empty start tag.
_TAG_STATES = frozenset(range(State.TAG_NAME, State.SELF_CLOSING_START_TAG + 1))


class TokenizerOpts:
    __slots__ = ("discard_bom", "initial_state")

    def __init__(self, discard_bom=True, initial_state=None):
        self.discard_bom = bool(discard_bom)
        self.initial_state = initial_state


class Tokenizer:
    """Markup tokenizer driven one state handler at a time.

    ``next_token()`` pulls characters from the cursor (``buffer``, ``pos``,
    ``current_char`` and the one-shot ``reconsume`` flag) and returns as soon
    as a token is complete. Once the input is exhausted it keeps returning
    EOF tokens. Anomalies go to ``errors`` and never interrupt tokenization.
    """

    __slots__ = (
        "buffer",
        "current_attr_name",
        "current_attr_value",
        "current_char",
        "current_data",
        "current_token",
        "errors",
        "length",
        "opts",
        "pos",
        "reconsume",
        "state",
    )

    def __init__(self, opts=None, errors=None):
        self.opts = opts or TokenizerOpts()
        self.errors = errors if errors is not None else ErrorLog()
        self.current_attr_name = []
        self.current_attr_value = []
        self.current_data = []
        self.reset("")

    def reset(self, text):
        if text and text[0] == "\ufeff" and self.opts.discard_bom:
            text = text[1:]

        self.buffer = text or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.reconsume = False
        self.current_char = ""
        self.current_token = None
        self.current_attr_name.clear()
        self.current_attr_value.clear()
        self.current_data.clear()
        self.errors.reset(self.buffer)

        initial_state = self.opts.initial_state
        if initial_state is None:
            self.state = State.DATA
        else:
            self.state = State(initial_state)
        if self.state in _TAG_STATES:
            self._start_tag(TokenKind.START_TAG)

    def next_token(self):
        handlers = self._STATE_HANDLERS
        while True:
            token = handlers[self.state](self)
            if token is not None:
                return token

    def __iter__(self):
        while True:
            token = self.next_token()
            yield token
            if token.kind == TokenKind.EOF:
                return

    # ---------------------
    # State handlers
    # ---------------------

    def _state_data(self):
        c = self._get_char()
        if c is None:
            return Token.eof()
        if c == "<":
            self.state = State.TAG_OPEN
            return None
        end = self.buffer.find("<", self.pos)
        if end == -1:
            end = self.length
        data = c + self.buffer[self.pos : end]
        self.pos = end
        self.current_char = data[-1]
        return Token.text(data)

    def _state_tag_open(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF after <")
            self.state = State.DATA
            return Token.text("<")
        if c == "!":
            self.state = State.MARKUP_DECLARATION_OPEN
            return None
        if c == "/":
            self.state = State.END_TAG_OPEN
            return None
        if c in ASCII_LETTERS:
            self._start_tag(TokenKind.START_TAG)
            self._reconsume_current()
            self.state = State.TAG_NAME
            return None
        if c == "?":
            self._emit_error("Unexpected '?' at tag open (processing instruction)")
            self.current_data.clear()
            self.state = State.BOGUS_COMMENT
            return None

        self._emit_error("Invalid first character of tag name")
        self._reconsume_current()
        self.state = State.DATA
        return Token.text("<")

    def _state_end_tag_open(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF after </")
            self.state = State.DATA
            return Token.text("</")
        if c in ASCII_LETTERS:
            self._start_tag(TokenKind.END_TAG)
            self._reconsume_current()
            self.state = State.TAG_NAME
            return None
        if c == ">":
            self._emit_error("Empty end tag")
            self.state = State.DATA
            return None

        self._emit_error("Invalid character after </")
        self.current_data.clear()
        self._reconsume_current()
        self.state = State.BOGUS_COMMENT
        return None

    def _state_tag_name(self):
        while True:
            if self._consume_run(_TAG_NAME_PATTERN, self.current_data, lower=True):
                continue
            c = self._get_char()
            if c is None:
                return self._eof_in_tag("EOF in tag name")
            if c in WHITESPACE:
                self.state = State.BEFORE_ATTRIBUTE_NAME
                return None
            if c == "/":
                self.state = State.SELF_CLOSING_START_TAG
                return None
            if c == ">":
                return self._emit_current_tag()
            self._append_lower(self.current_data, c)

    def _state_before_attribute_name(self):
        while True:
            c = self._get_char()
            if c is None:
                return self._eof_in_tag("EOF before attribute name")
            if c in WHITESPACE:
                continue
            if c == "/":
                self.state = State.SELF_CLOSING_START_TAG
                return None
            if c == ">":
                return self._emit_current_tag()
            self._start_attribute()
            if c == "=":
                # Kept as the first character of the name: <a =x> yields "=x".
                self._emit_error("Attribute name cannot start with '='")
                self.current_attr_name.append(c)
            else:
                self._reconsume_current()
            self.state = State.ATTRIBUTE_NAME
            return None

    def _state_attribute_name(self):
        while True:
            if self._consume_run(_ATTR_NAME_PATTERN, self.current_attr_name, lower=True):
                continue
            c = self._get_char()
            if c is None:
                return self._eof_in_tag("EOF in attribute name")
            if c in WHITESPACE:
                self.state = State.AFTER_ATTRIBUTE_NAME
                return None
            if c == "/":
                self.state = State.SELF_CLOSING_START_TAG
                return None
            if c == "=":
                self.state = State.BEFORE_ATTRIBUTE_VALUE
                return None
            if c == ">":
                return self._emit_current_tag()
            if c in ATTRIBUTE_NAME_ERROR_CHARS:
                self._emit_error("Invalid character in attribute name")
            self._append_lower(self.current_attr_name, c)

    def _state_after_attribute_name(self):
        while True:
            c = self._get_char()
            if c is None:
                return self._eof_in_tag("EOF after attribute name")
            if c in WHITESPACE:
                continue
            if c == "/":
                self.state = State.SELF_CLOSING_START_TAG
                return None
            if c == "=":
                self.state = State.BEFORE_ATTRIBUTE_VALUE
                return None
            if c == ">":
                return self._emit_current_tag()
            self._start_attribute()
            self._reconsume_current()
            self.state = State.ATTRIBUTE_NAME
            return None

    def _state_before_attribute_value(self):
        while True:
            c = self._get_char()
            if c is None:
                return self._eof_in_tag("EOF before attribute value")
            if c in WHITESPACE:
                continue
            if c == '"':
                self.state = State.ATTRIBUTE_VALUE_DOUBLE_QUOTED
                return None
            if c == "'":
                self.state = State.ATTRIBUTE_VALUE_SINGLE_QUOTED
                return None
            if c == ">":
                self._emit_error("Missing attribute value")
                return self._emit_current_tag()
            self._reconsume_current()
            self.state = State.ATTRIBUTE_VALUE_UNQUOTED
            return None

    def _state_attribute_value_double_quoted(self):
        return self._quoted_attribute_value('"', _ATTR_VALUE_DOUBLE_PATTERN)

    def _state_attribute_value_single_quoted(self):
        return self._quoted_attribute_value("'", _ATTR_VALUE_SINGLE_PATTERN)

    def _quoted_attribute_value(self, quote, stop_pattern):
        while True:
            if self._consume_run(stop_pattern, self.current_attr_value):
                continue
            c = self._get_char()
            if c is None:
                return self._eof_in_tag("EOF in attribute value")
            if c == quote:
                self.state = State.AFTER_ATTRIBUTE_VALUE_QUOTED
                return None
            self.current_attr_value.append(c)

    def _state_attribute_value_unquoted(self):
        while True:
            if self._consume_run(_ATTR_VALUE_UNQUOTED_PATTERN, self.current_attr_value):
                continue
            c = self._get_char()
            if c is None:
                return self._eof_in_tag("EOF in attribute value")
            if c in WHITESPACE:
                self._finish_attribute()
                self.state = State.BEFORE_ATTRIBUTE_NAME
                return None
            if c == ">":
                return self._emit_current_tag()
            if c in UNQUOTED_VALUE_ERROR_CHARS:
                self._emit_error("Invalid character in unquoted attribute value")
            self.current_attr_value.append(c)

    def _state_after_attribute_value_quoted(self):
        c = self._get_char()
        if c is None:
            return self._eof_in_tag("EOF after attribute value")
        if c in WHITESPACE:
            self._finish_attribute()
            self.state = State.BEFORE_ATTRIBUTE_NAME
            return None
        if c == "/":
            self.state = State.SELF_CLOSING_START_TAG
            return None
        if c == ">":
            return self._emit_current_tag()
        self._emit_error("Missing whitespace between attributes")
        self._reconsume_current()
        self.state = State.BEFORE_ATTRIBUTE_NAME
        return None

    def _state_self_closing_start_tag(self):
        c = self._get_char()
        if c is None:
            return self._eof_in_tag("EOF in self-closing tag")
        if c == ">":
            self.current_token.self_closing = True
            return self._emit_current_tag()
        self._emit_error("Unexpected character after '/' in tag")
        self._reconsume_current()
        self.state = State.BEFORE_ATTRIBUTE_NAME
        return None

    def _state_bogus_comment(self):
        while True:
            if self._consume_run(_BOGUS_COMMENT_PATTERN, self.current_data):
                continue
            c = self._get_char()
            if c is None:
                self._emit_error("EOF in bogus comment")
                return self._emit_comment()
            if c == ">":
                return self._emit_comment()
            self.current_data.append(c)

    def _state_markup_declaration_open(self):
        if self._consume_if("--"):
            self.current_data.clear()
            self.state = State.COMMENT_START
            return None
        if self._consume_if("DOCTYPE"):
            self.current_data.clear()
            self.state = State.DOCTYPE
            return None
        self._emit_error("Invalid markup declaration")
        self.current_data.clear()
        # Bogus comment starts from the current position, nothing to reconsume.
        self.state = State.BOGUS_COMMENT
        return None

    def _state_comment_start(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF in comment")
            return self._emit_comment()
        if c == "-":
            self.state = State.COMMENT_START_DASH
            return None
        if c == ">":
            self._emit_error("Abrupt comment end")
            return self._emit_comment()
        self._reconsume_current()
        self.state = State.COMMENT
        return None

    def _state_comment_start_dash(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF in comment")
            return self._emit_comment()
        if c == "-":
            self.state = State.COMMENT_END
            return None
        if c == ">":
            self._emit_error("Abrupt comment end")
            return self._emit_comment()
        self.current_data.append("-")
        self._reconsume_current()
        self.state = State.COMMENT
        return None

    def _state_comment(self):
        while True:
            if self._consume_run(_COMMENT_PATTERN, self.current_data):
                continue
            c = self._get_char()
            if c is None:
                self._emit_error("EOF in comment")
                return self._emit_comment()
            if c == "-":
                self.state = State.COMMENT_END_DASH
                return None
            self.current_data.append(c)

    def _state_comment_end_dash(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF in comment")
            return self._emit_comment()
        if c == "-":
            self.state = State.COMMENT_END
            return None
        self.current_data.append("-")
        self._reconsume_current()
        self.state = State.COMMENT
        return None

    def _state_comment_end(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF in comment")
            return self._emit_comment()
        if c == ">":
            return self._emit_comment()
        if c == "!":
            self.state = State.COMMENT_END_BANG
            return None
        if c == "-":
            self.current_data.append("-")
            return None
        self.current_data.append("--")
        self._reconsume_current()
        self.state = State.COMMENT
        return None

    def _state_comment_end_bang(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF in comment")
            return self._emit_comment()
        if c == "-":
            self.current_data.append("--!")
            self.state = State.COMMENT_END_DASH
            return None
        if c == ">":
            self._emit_error("Comment ended with --!>")
            return self._emit_comment()
        self.current_data.append("--!")
        self._reconsume_current()
        self.state = State.COMMENT
        return None

    def _state_doctype(self):
        c = self._get_char()
        if c is None:
            self._emit_error("EOF in DOCTYPE")
            return self._emit_doctype(force_quirks=True)
        if c in WHITESPACE:
            self.state = State.BEFORE_DOCTYPE_NAME
            return None
        self._emit_error("Missing whitespace before DOCTYPE name")
        self._reconsume_current()
        self.state = State.BEFORE_DOCTYPE_NAME
        return None

    def _state_before_doctype_name(self):
        while True:
            c = self._get_char()
            if c is None:
                self._emit_error("EOF before DOCTYPE name")
                return self._emit_doctype(force_quirks=True)
            if c in WHITESPACE:
                continue
            if c == ">":
                self._emit_error("Missing DOCTYPE name")
                return self._emit_doctype(force_quirks=True)
            self._reconsume_current()
            self.state = State.DOCTYPE_NAME
            return None

    def _state_doctype_name(self):
        while True:
            c = self._get_char()
            if c is None:
                self._emit_error("EOF in DOCTYPE name")
                return self._emit_doctype(force_quirks=True)
            if c in WHITESPACE:
                self.state = State.AFTER_DOCTYPE_NAME
                return None
            if c == ">":
                return self._emit_doctype()
            self._append_lower(self.current_data, c)

    def _state_after_doctype_name(self):
        while True:
            c = self._get_char()
            if c is None:
                self._emit_error("EOF after DOCTYPE name")
                return self._emit_doctype(force_quirks=True)
            if c in WHITESPACE:
                continue
            if c == ">":
                return self._emit_doctype()
            # PUBLIC/SYSTEM identifiers are not modeled: skip ahead to ">".
            logger.debug(f"Skipping DOCTYPE identifiers at position {self.pos - 1}")
            self.state = State.BOGUS_DOCTYPE
            return None

    def _state_bogus_doctype(self):
        end = self.buffer.find(">", self.pos)
        if end == -1:
            self.pos = self.length
            self.current_char = None
            self._emit_error("EOF in DOCTYPE")
            return self._emit_doctype(force_quirks=True)
        self.pos = end + 1
        self.current_char = ">"
        return self._emit_doctype()

    _STATE_HANDLERS = [
        _state_data,
        _state_tag_open,
        _state_end_tag_open,
        _state_tag_name,
        _state_before_attribute_name,
        _state_attribute_name,
        _state_after_attribute_name,
        _state_before_attribute_value,
        _state_attribute_value_double_quoted,
        _state_attribute_value_single_quoted,
        _state_attribute_value_unquoted,
        _state_after_attribute_value_quoted,
        _state_self_closing_start_tag,
        _state_bogus_comment,
        _state_markup_declaration_open,
        _state_comment_start,
        _state_comment_start_dash,
        _state_comment,
        _state_comment_end_dash,
        _state_comment_end,
        _state_comment_end_bang,
        _state_doctype,
        _state_before_doctype_name,
        _state_doctype_name,
        _state_after_doctype_name,
        _state_bogus_doctype,
    ]

    # ---------------------
    # Low-level helpers
    # ---------------------

    def _get_char(self):
        if self.reconsume:
            self.reconsume = False
            return self.current_char

        if self.pos >= self.length:
            self.current_char = None
            return None

        c = self.buffer[self.pos]
        self.pos += 1
        self.current_char = c
        return c

    def _reconsume_current(self):
        self.reconsume = True

    def _consume_if(self, literal):
        end = self.pos + len(literal)
        if end > self.length:
            return False
        if self.buffer[self.pos : end] != literal:
            return False
        self.pos = end
        self.current_char = literal[-1]
        return True

    def _consume_run(self, stop_pattern, target, lower=False):
        """Append the input up to the next ``stop_pattern`` match to ``target``.

        Returns False without consuming anything when a character is pending
        reconsumption or the run would be empty.
        """
        if self.reconsume:
            return False
        pos = self.pos
        length = self.length
        if pos >= length:
            return False
        match = stop_pattern.search(self.buffer, pos)
        end = match.start() if match else length
        if end == pos:
            return False
        chunk = self.buffer[pos:end]
        if lower:
            chunk = chunk.translate(ASCII_LOWER_TABLE)
        target.append(chunk)
        self.pos = end
        self.current_char = chunk[-1]
        return True

    def _append_lower(self, target, c):
        if "A" <= c <= "Z":
            c = chr(ord(c) + 32)
        target.append(c)

    def _start_tag(self, kind):
        self.current_token = Token(kind)
        self.current_data.clear()
        self.current_attr_name.clear()
        self.current_attr_value.clear()

    def _start_attribute(self):
        self._finish_attribute()

    def _finish_attribute(self):
        name_buffer = self.current_attr_name
        value_buffer = self.current_attr_value
        if not name_buffer:
            value_buffer.clear()
            return
        name = "".join(name_buffer)
        value = "".join(value_buffer)
        name_buffer.clear()
        value_buffer.clear()
        attributes = self.current_token.attributes
        if name in attributes:
            self._emit_error(f"Duplicate attribute: {name}")
            return
        attributes[name] = value

    def _emit_current_tag(self):
        self._finish_attribute()
        token = self.current_token
        token.name = "".join(self.current_data)
        self.current_data.clear()
        self.current_token = None
        self.state = State.DATA
        if not token.name:
            # Only reachable when tokenizing starts inside a tag.
            self._emit_error("Missing tag name")
            return None
        return token

    def _eof_in_tag(self, message):
        # A tag cut off by the end of input is dropped rather than emitted.
        self._emit_error(message)
        self.current_token = None
        self.current_data.clear()
        self.current_attr_name.clear()
        self.current_attr_value.clear()
        self.state = State.DATA
        return Token.eof()

    def _emit_comment(self):
        data = "".join(self.current_data)
        self.current_data.clear()
        self.state = State.DATA
        return Token.comment(data)

    def _emit_doctype(self, force_quirks=False):
        name = "".join(self.current_data)
        self.current_data.clear()
        self.state = State.DATA
        return Token.doctype(name, force_quirks=force_quirks)

    def _emit_error(self, message):
        offset = self.pos - 1 if self.current_char else self.pos
        self.errors(message, offset)


def tokenize(text, opts=None):
    """Return the full token list for ``text``, ending with the EOF token."""
    tokenizer = Tokenizer(opts)
    tokenizer.reset(text)
    return list(tokenizer)
