import enum
import logging

logger = logging.getLogger(__name__)


class TokenKind(enum.IntEnum):
    DOCTYPE = 0
    START_TAG = 1
    END_TAG = 2
    COMMENT = 3
    TEXT = 4
    EOF = 5


class Token:
    __slots__ = ("attributes", "data", "force_quirks", "kind", "name", "self_closing")

    def __init__(self, kind, name="", data="", attributes=None, self_closing=False, force_quirks=False):
        self.kind = kind
        self.name = name
        self.data = data
        self.attributes = attributes if attributes is not None else {}
        self.self_closing = bool(self_closing)
        self.force_quirks = bool(force_quirks)

    @classmethod
    def start_tag(cls, name=""):
        return cls(TokenKind.START_TAG, name=name)

    @classmethod
    def end_tag(cls, name=""):
        return cls(TokenKind.END_TAG, name=name)

    @classmethod
    def text(cls, data):
        return cls(TokenKind.TEXT, data=data)

    @classmethod
    def comment(cls, data=""):
        return cls(TokenKind.COMMENT, data=data)

    @classmethod
    def doctype(cls, name="", force_quirks=False):
        return cls(TokenKind.DOCTYPE, name=name, force_quirks=force_quirks)

    @classmethod
    def eof(cls):
        return cls(TokenKind.EOF)

    @property
    def is_tag(self):
        return self.kind in (TokenKind.START_TAG, TokenKind.END_TAG)

    def __repr__(self):
        kind = self.kind
        if self.is_tag:
            if self.attributes:
                attrs = " " + " ".join(f"{name}={value!r}" for name, value in self.attributes.items())
            else:
                attrs = ""
            closing = " /" if self.self_closing else ""
            kind_str = "start" if kind == TokenKind.START_TAG else "end"
            return f"<{kind_str}:{self.name}{attrs}{closing}>"
        if kind == TokenKind.TEXT:
            return f"Text({self.data!r})"
        if kind == TokenKind.COMMENT:
            return f"Comment({self.data!r})"
        if kind == TokenKind.DOCTYPE:
            quirks = ", force_quirks" if self.force_quirks else ""
            return f"Doctype({self.name!r}{quirks})"
        return "EOF"

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.name == other.name
            and self.data == other.data
            and self.attributes == other.attributes
            and self.self_closing == other.self_closing
            and self.force_quirks == other.force_quirks
        )

    __hash__ = None


class ParseError:
    """A recoverable parse anomaly with its location in the input."""

    __slots__ = ("column", "line", "message", "offset")

    def __init__(self, message, offset=None, line=None, column=None):
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column

    def __repr__(self):
        if self.line is not None and self.column is not None:
            return f"ParseError({self.message!r}, offset={self.offset}, line={self.line}, column={self.column})"
        if self.offset is not None:
            return f"ParseError({self.message!r}, offset={self.offset})"
        return f"ParseError({self.message!r})"

    def __str__(self):
        if self.offset is not None:
            return f"Error at position {self.offset}: {self.message}"
        return self.message

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.message == other.message and self.offset == other.offset

    __hash__ = None  # Unhashable since we define __eq__


class StrictModeError(SyntaxError):
    """Raised by a strict parser on the first recorded parse error."""

    def __init__(self, error):
        self.error = error
        super().__init__(str(error))


class ErrorLog:
    """Append-only error sink shared by the tokenizer and the tree builder.

    Calling the log records a ParseError, locating ``offset`` in ``source``
    to fill in line and column. With ``strict`` set the first error is raised
    as StrictModeError instead of being collected.
    """

    __slots__ = ("errors", "source", "strict")

    def __init__(self, strict=False):
        self.errors = []
        self.source = ""
        self.strict = bool(strict)

    def reset(self, source=""):
        self.errors = []
        self.source = source

    def __call__(self, message, offset=None):
        line = column = None
        if offset is not None:
            source = self.source
            line = source.count("\n", 0, offset) + 1
            column = offset - source.rfind("\n", 0, offset)
        error = ParseError(message, offset, line, column)
        self.errors.append(error)
        logger.debug(f"Parse error: {error}")
        if self.strict:
            raise StrictModeError(error)
        return error

    def __len__(self):
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)
