"""
Naming utilities shared by the introspector, analyzer and templates.
"""

import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z]+(?=[A-Z][a-z]|[0-9]|\b)|[A-Z][a-z]*|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def snake_case(text: str) -> str:
    """Convert PascalCase, camelCase or separated text to snake_case.

    Examples:
        "User" -> "user"
        "TestUser" -> "test_user"
        "HTTPRequest" -> "http_request"
        "user_status" -> "user_status"
    """
    if not text:
        return ""
    words = _split_into_words(_normalize_separators(text))
    return "_".join(word.lower() for word in words)


def camelize(text: str) -> str:
    """Convert snake_case text to an Elixir module segment.

    Examples:
        "my_app" -> "MyApp"
        "accounts" -> "Accounts"
    """
    if not text:
        return ""
    words = _split_into_words(_normalize_separators(text))
    return "".join(word[:1].upper() + word[1:] for word in words)


def last_segment(identity: str) -> str:
    """Return the last dotted segment of a module identity ("Accounts.User" -> "User")."""
    return identity.rsplit(".", 1)[-1]


def singularize(source: str) -> str:
    """Strip exactly one trailing "s".

    Naive on purpose: "users" -> "user", but also "status" -> "statu".
    """
    return source[:-1] if source.endswith("s") else source


def pluralize(singular: str) -> str:
    return singular + "s"


_PLAIN_ATOM = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*[?!]?$")


def atom(name: str) -> str:
    """Elixir atom literal: `:active`, or `:"in-progress"` when quoting is needed."""
    if _PLAIN_ATOM.match(name):
        return f":{name}"
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f':"{escaped}"'
