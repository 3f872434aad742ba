"""Name conversions between profile identifiers, TypeScript classes and files.

Conventions:
  - canonical name   -> taken from the profile id:  "bookReview-representation" -> "bookReview"
  - class name       -> upper camel case:           "bookReview" -> "BookReview"
  - interface name   -> "I" + class name:           "IBookReview"
  - file stem        -> kebab case of class name:   "book-review"
  - relation target  -> word after "#" in rt:       ".../profile/authors#author-representation" -> "author"

Cardinality of a reference is decided by whether the *property* name is an
English plural ("books" -> Book[], "owner" -> Owner). This is a heuristic and
will misclassify some irregular or non-English names.
"""

from __future__ import annotations

import re

INTERFACE_PREFIX = "I"

_CANONICAL_NAME = re.compile(r"^(\w+)-")
_RELATION_TARGET = re.compile(r"#(\w+)")

# Irregular singular -> plural forms
_PLURALS: dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "foot": "feet",
    "tooth": "teeth",
    "mouse": "mice",
    "goose": "geese",
    "ox": "oxen",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "analysis": "analyses",
    "thesis": "theses",
    "crisis": "crises",
    "leaf": "leaves",
    "life": "lives",
    "wife": "wives",
    "knife": "knives",
    "half": "halves",
    "shelf": "shelves",
    "series": "series",
    "species": "species",
}

_SINGULARS: dict[str, str] = {v: k for k, v in _PLURALS.items()}

# Singular words that end like plurals
_SINGULAR_ENDINGS = ("ss", "us", "is", "ics")


def _last_word(name: str) -> str:
    """Return the last word of a camelCase, snake_case or kebab-case name."""
    words = _split_words(name)
    return words[-1].lower() if words else ""


def _split_words(name: str) -> list[str]:
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", name)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1 \2", s1)
    return [w for w in re.split(r"[\s_\-.]+", s2) if w]


def singularize(word: str) -> str:
    """Return the singular form of a lowercase noun."""
    if word in _SINGULARS:
        return _SINGULARS[word]
    if word in _PLURALS:
        return word
    if word.endswith(_SINGULAR_ENDINGS):
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("sses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


def is_plural(name: str) -> bool:
    """Check whether the last word of a property name is a plural noun."""
    word = _last_word(name)
    if not word:
        return False
    if word in _SINGULARS:
        return True
    if word in _PLURALS:
        return False
    return singularize(word) != word


def to_class_name(name: str) -> str:
    """Convert any identifier to UpperCamelCase."""
    return "".join(w[:1].upper() + w[1:] for w in _split_words(name))


def to_interface_name(class_name: str) -> str:
    return INTERFACE_PREFIX + class_name


def to_kebab_case(name: str) -> str:
    """Convert camelCase or PascalCase to kebab-case."""
    return "-".join(w.lower() for w in _split_words(name))


def canonical_name(descriptor_id: str) -> str | None:
    """Extract the entity name from a profile descriptor id, or None."""
    match = _CANONICAL_NAME.match(descriptor_id or "")
    return match.group(1) if match else None


def relation_target(rt: str) -> str | None:
    """Extract the referenced entity name from an rt value, or None."""
    match = _RELATION_TARGET.search(rt or "")
    return match.group(1) if match else None
