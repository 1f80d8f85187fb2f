import re
from typing import Dict, List

VARIANT_KEYS = ("lower", "upper", "pascal", "camel", "snake", "kebab")

_SEPARATORS = re.compile(r"[\s._-]+")
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
# HTTPServer -> HTTP Server
_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")


def split_words(value: str) -> List[str]:
    """
    Split a raw value into lowercase words.

    Separators (whitespace, '.', '_', '-') become word breaks, as do camel
    boundaries ("myThing") and acronym boundaries ("HTTPServer").
    """
    if not value:
        return []
    s = _SEPARATORS.sub(" ", value)
    s = _LOWER_UPPER.sub(r"\1 \2", s)
    s = _ACRONYM.sub(r"\1 \2", s)
    return s.lower().split()


def _capitalize(word: str) -> str:
    # Only the first character changes, unlike str.capitalize()
    return word[:1].upper() + word[1:]


def render_variants(words: List[str]) -> Dict[str, str]:
    flat = "".join(words)
    return {
        "lower": flat,
        "upper": flat.upper(),
        "pascal": "".join(_capitalize(w) for w in words),
        "camel": (words[0] + "".join(_capitalize(w) for w in words[1:])) if words else "",
        "snake": "_".join(words),
        "kebab": "-".join(words),
    }


def build_variants(value: str) -> Dict[str, str]:
    """
    Build the six naming-style variants of a value.

    >>> build_variants("my thing")["pascal"]
    'MyThing'
    """
    return render_variants(split_words(value))
