import re

_INVALID_CHARS = re.compile(r"[^a-z0-9\s_-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(name: str) -> str:
    """
    Turn a display name into a URL slug.

    Lower-cases the text, drops anything that is not a letter, digit,
    whitespace, underscore or hyphen, and joins the remaining words with single hyphens.
    The result only contains ``[a-z0-9-]`` and never starts, ends or doubles
    a hyphen. Empty (or all-symbol) input gives an empty slug.

    Example:
        >>> slugify("  Toyota  Avanza 1.5 G!! ")
        'toyota-avanza-15-g'
    """
    slug = _INVALID_CHARS.sub("", (name or "").lower())
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")
