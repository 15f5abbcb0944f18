from .node import Comment, Document, DocumentType, Element, Node, NodeType, Text
from .parser import HTMLParser, parse, parse_element
from .selector import SelectorError, matches, query, query_all
from .serialize import to_html, to_test_format
from .tokenizer import State, Tokenizer, TokenizerOpts, tokenize
from .tokens import ParseError, StrictModeError, Token, TokenKind

__all__ = [
    "Comment",
    "Document",
    "DocumentType",
    "Element",
    "HTMLParser",
    "Node",
    "NodeType",
    "ParseError",
    "SelectorError",
    "State",
    "StrictModeError",
    "Text",
    "Token",
    "TokenKind",
    "Tokenizer",
    "TokenizerOpts",
    "matches",
    "parse",
    "parse_element",
    "query",
    "query_all",
    "to_html",
    "to_test_format",
    "tokenize",
]
