"""Parser entry points: a reusable HTMLParser and one-shot helper functions."""

import logging

from .constants import FRAGMENT_WRAPPER
from .selector import query
from .tokenizer import Tokenizer, TokenizerOpts
from .tokens import ErrorLog, StrictModeError, TokenKind
from .treebuilder import TreeBuilder

logger = logging.getLogger(__name__)

__all__ = ["HTMLParser", "StrictModeError", "parse", "parse_element"]


class HTMLParser:
    """Tokenizer and tree builder wired to one shared error log.

    An instance can parse any number of documents one after the other; each
    call starts from a clean state. It must not be used from two call sites
    at once.
    """

    __slots__ = ("error_log", "strict", "tokenizer", "tree_builder")

    def __init__(self, *, strict=False, tokenizer_opts=None):
        self.strict = bool(strict)
        self.error_log = ErrorLog(strict=self.strict)
        self.tokenizer = Tokenizer(tokenizer_opts or TokenizerOpts(), self.error_log)
        self.tree_builder = TreeBuilder(self.error_log)

    @property
    def errors(self):
        return self.error_log.errors

    def parse(self, text):
        tokenizer = self.tokenizer
        tree_builder = self.tree_builder

        tokenizer.reset(text or "")
        tree_builder.reset()

        while True:
            token = tokenizer.next_token()
            tree_builder.process_token(token, tokenizer.pos)
            if token.kind == TokenKind.EOF:
                break

        document = tree_builder.finish()
        logger.debug(f"Parsed {tokenizer.length} characters with {len(self.error_log)} parse errors")
        return document

    def parse_element(self, fragment):
        """Parse ``fragment`` and return a detached copy of its first element.

        Returns None when the fragment yields no element.
        """
        document = self.parse(f"<{FRAGMENT_WRAPPER}>{fragment or ''}</{FRAGMENT_WRAPPER}>")
        wrapper = query(document, FRAGMENT_WRAPPER)
        if wrapper is None:
            return None
        first = wrapper.first_element_child
        if first is None:
            return None
        return first.clone_node(deep=True)


def parse(text, **kwargs):
    return HTMLParser(**kwargs).parse(text)


def parse_element(fragment, **kwargs):
    return HTMLParser(**kwargs).parse_element(fragment)
