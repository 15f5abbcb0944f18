"""Character classes and element sets shared by the tokenizer, tree builder and serializer.

Usage:
    from tagtree.constants import SELF_CLOSING_TAGS, WHITESPACE
"""

import string

# Elements that never receive children and are not pushed onto the open
# elements stack, whether or not the tag carries a trailing "/".
SELF_CLOSING_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Tags whose end tag searches the whole stack and closes everything above the match.
ROOT_END_TAGS = frozenset({"body", "html"})

WHITESPACE = frozenset("\t\n\x0b\x0c\r ")

ASCII_LETTERS = frozenset(string.ascii_letters)

# Maps A-Z to a-z and leaves every other character alone, matching the tokenizer.
ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})

# Characters logged as errors (but still kept) inside an unquoted attribute value.
UNQUOTED_VALUE_ERROR_CHARS = frozenset("\"'<=`")

# Characters logged as errors (but still kept) inside an attribute name.
ATTRIBUTE_NAME_ERROR_CHARS = frozenset("\"'<")

# Name of the synthetic container used for single-element parsing.
FRAGMENT_WRAPPER = "div"
