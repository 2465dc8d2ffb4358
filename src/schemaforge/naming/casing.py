"""Identifier case conversions.

All functions are total over arbitrary strings and idempotent.
"""

from __future__ import annotations

_SEPARATORS = frozenset("_ ")


def upper_first(s: str) -> str:
    return s[:1].upper() + s[1:]


def lower_first(s: str) -> str:
    return s[:1].lower() + s[1:]


def snake_case(s: str, lowercase: bool = True) -> str:
    """Convert a camel/mixed identifier into underscore separated tokens.

    An underscore goes before an uppercase character that follows a
    character which is neither uppercase nor an underscore, so runs of
    capitals stay together: ``"personAddressID"`` -> ``"person_address_id"``.
    """
    out: list[str] = []
    previous = ""
    for c in s:
        if c.isupper() and previous and not previous.isupper() and previous != "_":
            out.append("_")
        out.append(c)
        previous = c
    result = "".join(out)
    return result.lower() if lowercase else result


def to_camel_case(s: str, upper_first: bool = False) -> str:
    """Convert underscore/space separated tokens into camel case.

    Leading underscores are preserved. A run of separators is one word
    boundary, and only ASCII lowercase letters are capitalized after it.
    Strings without separators come back unchanged, apart from the first
    letter when ``upper_first`` is set.

    >>> to_camel_case("person_address")
    'personAddress'
    >>> to_camel_case("person__address", upper_first=True)
    'PersonAddress'
    >>> to_camel_case("_id")
    '_id'
    """
    leading = len(s) - len(s.lstrip("_"))
    out: list[str] = [s[:leading]]
    capitalize_next = upper_first
    for c in s[leading:]:
        if c in _SEPARATORS:
            capitalize_next = True
            continue
        if capitalize_next and "a" <= c <= "z":
            out.append(c.upper())
        else:
            out.append(c)
        capitalize_next = False
    return "".join(out)


def normalize_upper_runs(s: str) -> str:
    """Fold runs of capitals into a single capitalized word.

    The last capital of a run stays upper when a lowercase letter follows, as
    it starts the next word: ``"CategoryID"`` -> ``"CategoryId"``,
    ``"URLString"`` -> ``"UrlString"``.
    """
    out: list[str] = []
    i = 0
    while i < len(s):
        if not s[i].isupper():
            out.append(s[i])
            i += 1
            continue
        end = i
        while end < len(s) and s[end].isupper():
            end += 1
        run = s[i:end]
        if end < len(s) and s[end].islower() and len(run) > 1:
            out.append(run[0] + run[1:-1].lower() + run[-1])
        else:
            out.append(run[0] + run[1:].lower())
        i = end
    return "".join(out)
