"""Name conversion and English inflection helpers.

Generated code follows the framework's naming conventions: singular
StudlyCase models (``BlogPost``), plural snake_case tables (``blog_posts``),
kebab-case route segments (``blog-posts``).  Only the last word of a compound
name is inflected, so ``order_items`` singularises to ``order_item``.
"""

from __future__ import annotations

import re


_IRREGULAR: dict[str, str] = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "tooth": "teeth",
    "foot": "feet",
    "mouse": "mice",
    "goose": "geese",
    "ox": "oxen",
    "leaf": "leaves",
    "life": "lives",
    "knife": "knives",
    "wife": "wives",
    "half": "halves",
    "shelf": "shelves",
    "wolf": "wolves",
    "thief": "thieves",
    "criterion": "criteria",
    "analysis": "analyses",
    "axis": "axes",
    "crisis": "crises",
    "quiz": "quizzes",
    "abuse": "abuses",
    "excuse": "excuses",
    "movie": "movies",
    "cookie": "cookies",
    "pie": "pies",
}

_IRREGULAR_PLURALS: dict[str, str] = {plural: single for single, plural in _IRREGULAR.items()}

_UNCOUNTABLE: frozenset[str] = frozenset({
    "audio", "data", "equipment", "feedback", "fish", "information",
    "metadata", "money", "news", "rice", "series", "sheep", "species",
    "staff", "traffic", "media", "deer", "police", "software", "hardware",
})

# Plural endings that drop "es"; any other "-uses" ending drops only the "s".
_ES_SUFFIXES = (
    "sses", "shes", "ches", "xes", "zzes",
    "tuses", "buses", "nuses", "ruses", "puses", "cuses",
)

_WORD_SPLIT = re.compile(r"[-_\s.]+")


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------

def snake(value: str) -> str:
    """Convert ``BlogPost``, ``blog-post`` or ``blog post`` to ``blog_post``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value.strip())
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    s3 = re.sub(r"[^a-zA-Z0-9]+", "_", s2)
    return s3.strip("_").lower()


def studly(value: str) -> str:
    """Convert ``blog_post`` or ``blog-post`` to ``BlogPost``."""
    parts = _WORD_SPLIT.split(snake(value))
    return "".join(word.capitalize() for word in parts if word)


def camel(value: str) -> str:
    """Convert ``blog_post`` to ``blogPost``."""
    pascal = studly(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


def kebab(value: str) -> str:
    """Convert ``BlogPost`` to ``blog-post``."""
    return snake(value).replace("_", "-")


# ---------------------------------------------------------------------------
# Inflection
# ---------------------------------------------------------------------------

def _inflect_last_word(value: str, fn) -> str:
    match = re.search(r"([A-Za-z]+)$", value)
    if not match:
        return value
    word = match.group(1)
    # Only the last segment of StudlyCase is inflected: BlogPost -> Blog + Post
    humps = re.findall(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])", word)
    last = humps[-1] if humps else word
    prefix = value[: len(value) - len(last)]
    return prefix + _match_case(last, fn(last.lower()))


def _match_case(original: str, inflected: str) -> str:
    if original.isupper() and len(original) > 1:
        return inflected.upper()
    if original[:1].isupper():
        return inflected[:1].upper() + inflected[1:]
    return inflected


def _singular_word(word: str) -> str:
    if word in _UNCOUNTABLE:
        return word
    if word in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[word]
    if word in _IRREGULAR:
        return word
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("ouses", "auses")):
        return word[:-1]
    if word.endswith(_ES_SUFFIXES):
        return word[:-2]
    if word.endswith(("ss", "us", "is")):
        return word
    if word.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def _plural_word(word: str) -> str:
    if word in _UNCOUNTABLE:
        return word
    if word in _IRREGULAR:
        return _IRREGULAR[word]
    if word in _IRREGULAR_PLURALS:
        return word
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def singularize(value: str) -> str:
    """Return the singular form: ``categories`` -> ``category``."""
    return _inflect_last_word(value, _singular_word)


def pluralize(value: str) -> str:
    """Return the plural form: ``category`` -> ``categories``."""
    return _inflect_last_word(value, _plural_word)


def table_name(model: str) -> str:
    """``BlogPost`` -> ``blog_posts``."""
    return pluralize(snake(model))


def model_name(value: str) -> str:
    """``blog_posts`` or ``blog-posts`` -> ``BlogPost``."""
    return studly(singularize(snake(value)))


def resource_uri(model: str) -> str:
    """``BlogPost`` -> ``blog-posts``, the ``apiResource`` URI segment."""
    return kebab(pluralize(model))


def route_parameter(model: str) -> str:
    """``BlogPost`` -> ``blog_post``, the implicit-binding route parameter."""
    return snake(model)
