"""
String utility functions for crudviews.

Case conversion used for schema identifiers and operation ids. Words are
split on case boundaries and on any non-alphanumeric character, so
``"user_profile post"``, ``"UserProfile post"`` and ``"user-profile Post"``
all produce ``UserProfilePost``.
"""

from __future__ import annotations

import re

# lower->Upper boundary, UPPER run followed by Capitalized word, digit runs stay attached
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+")


def split_words(value: str) -> list[str]:
    """
    Split a name into its words.

    Examples:
        >>> split_words("widgetPart post")
        ['widget', 'Part', 'post']
        >>> split_words("HTTPRequest")
        ['HTTP', 'Request']
    """
    return _WORD_RE.findall(value)


def pascal_case(value: str) -> str:
    """
    Convert to PascalCase.

    Examples:
        >>> pascal_case("Widget post")
        'WidgetPost'
        >>> pascal_case("user_profile patch")
        'UserProfilePatch'
    """
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(value))


def camel_case(value: str) -> str:
    """
    Convert to camelCase.

    Examples:
        >>> camel_case("get Widgets")
        'getWidgets'
    """
    pascal = pascal_case(value)
    return pascal[:1].lower() + pascal[1:]
