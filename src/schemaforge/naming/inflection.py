"""English singularization and pluralization for schema identifiers.

Both directions are ordered rule tables evaluated first-match-wins:
irregular words (whole word, case-insensitive) first, then suffix rules from
most to least specific. Suffix matching is case-insensitive and keeps the
untouched stem exactly as written, so ``ProductCategories`` becomes
``ProductCategory``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

_VOWELS = frozenset("aeiou")

IRREGULARS: tuple[tuple[str, str], ...] = (
    ("person", "people"),
    ("man", "men"),
    ("woman", "women"),
    ("child", "children"),
    ("sex", "sexes"),
    ("move", "moves"),
    ("zombie", "zombies"),
    ("mouse", "mice"),
    ("louse", "lice"),
    ("ox", "oxen"),
    ("axis", "axes"),
    ("criterion", "criteria"),
)

UNCOUNTABLES = frozenset(
    {"staff", "news", "series", "species", "equipment", "information", "data", "metadata"}
)


@dataclass(frozen=True, slots=True)
class InflectionRule:
    """One row of a rule table: a predicate and the transform it guards."""

    name: str
    matches: Callable[[str], bool]
    apply: Callable[[str], str]
    # Generic catch-all: the result is a guess
    fallback: bool = False


def _match_case(word: str, addition: str) -> str:
    return addition.upper() if word.isupper() and len(word) > 1 else addition


def _common_prefix(a: str, b: str) -> int:
    n = 0
    while n < min(len(a), len(b)) and a[n] == b[n]:
        n += 1
    return n


def _suffix(
    suffix: str,
    replacement: str,
    *,
    guard: Callable[[str], bool] | None = None,
    fallback: bool = False,
) -> InflectionRule:
    """Rule replacing ``suffix`` (matched case-insensitively) with ``replacement``."""
    shared = _common_prefix(suffix, replacement)

    def matches(word: str) -> bool:
        lower = word.lower()
        return lower.endswith(suffix) and (guard is None or guard(lower))

    def apply(word: str) -> str:
        # Characters common to suffix and replacement keep their spelling
        keep = len(word) - len(suffix) + shared
        return word[:keep] + _match_case(word, replacement[shared:])

    return InflectionRule(f"{suffix}->{replacement}", matches, apply, fallback)


def _keep(suffix: str) -> InflectionRule:
    """Rule that stops the table: words ending in ``suffix`` stay as they are."""
    return InflectionRule(
        f"keep:{suffix}", lambda word: word.lower().endswith(suffix), lambda word: word
    )


def _consonant_before(suffix: str) -> Callable[[str], bool]:
    def guard(lower: str) -> bool:
        stem = lower[: len(lower) - len(suffix)]
        return bool(stem) and stem[-1] not in _VOWELS

    return guard


def _not_after(chars: str, suffix: str) -> Callable[[str], bool]:
    def guard(lower: str) -> bool:
        stem = lower[: len(lower) - len(suffix)]
        return bool(stem) and stem[-1] not in chars

    return guard


def _irregular_rule(pairs: dict[str, str], name: str) -> InflectionRule:
    def matches(word: str) -> bool:
        return word.lower() in pairs

    def apply(word: str) -> str:
        target = pairs[word.lower()]
        if word.isupper() and len(word) > 1:
            return target.upper()
        if word[:1].isupper():
            return target[:1].upper() + target[1:]
        return target

    return InflectionRule(name, matches, apply)


_TO_SINGULAR = {plural: singular for singular, plural in IRREGULARS}
_TO_SINGULAR.update({singular: singular for singular, _ in IRREGULARS})
_TO_PLURAL = {singular: plural for singular, plural in IRREGULARS}
_TO_PLURAL.update({plural: plural for _, plural in IRREGULARS})

_uncountable = InflectionRule(
    "uncountable", lambda word: word.lower() in UNCOUNTABLES, lambda word: word
)

# Latin/Greek words ending in -sis whose plural is -ses
_SIS_WORDS = (
    "analysis",
    "basis",
    "crisis",
    "diagnosis",
    "ellipsis",
    "hypothesis",
    "oasis",
    "parenthesis",
    "prognosis",
    "synopsis",
    "thesis",
)

SINGULAR_RULES: tuple[InflectionRule, ...] = (
    _irregular_rule(_TO_SINGULAR, "irregular"),
    _uncountable,
    _suffix("octopi", "octopus"),
    _suffix("viri", "virus"),
    _suffix("aliases", "alias"),
    _suffix("statuses", "status"),
    _suffix("buses", "bus"),
    _suffix("vertices", "vertex"),
    _suffix("indices", "index"),
    _suffix("apices", "apex"),
    _suffix("codices", "codex"),
    _suffix("matrices", "matrix"),
    _suffix("quizzes", "quiz"),
    _suffix("databases", "database"),
    _suffix("testes", "testis"),
    _suffix("shoes", "shoe"),
    _suffix("movies", "movie"),
    *(_suffix(word[:-3] + "ses", word) for word in _SIS_WORDS),
    _suffix("strata", "stratum"),
    _suffix("bacteria", "bacterium"),
    _suffix("curricula", "curriculum"),
    # Already singular
    _keep("alias"),
    _keep("ss"),
    _keep("us"),
    _keep("is"),
    _suffix("oes", "o"),
    _suffix("xes", "x"),
    _suffix("ches", "ch"),
    _suffix("sses", "ss"),
    _suffix("shes", "sh"),
    _suffix("zzes", "zz"),
    _suffix("quies", "quy"),
    _suffix("ies", "y", guard=_consonant_before("ies")),
    _suffix("lves", "lf"),
    _suffix("rves", "rf"),
    _suffix("tives", "tive"),
    _suffix("hives", "hive"),
    _suffix("ves", "fe", guard=_not_after("f", "ves")),
    _suffix("s", "", guard=lambda lower: len(lower) > 1, fallback=True),
)

PLURAL_RULES: tuple[InflectionRule, ...] = (
    _irregular_rule(_TO_PLURAL, "irregular"),
    _uncountable,
    _suffix("quiz", "quizzes"),
    _suffix("matrix", "matrices"),
    _suffix("vertex", "vertices"),
    _suffix("index", "indices"),
    _suffix("apex", "apices"),
    _suffix("codex", "codices"),
    _suffix("octopus", "octopi"),
    _suffix("virus", "viri"),
    _suffix("alias", "aliases"),
    _suffix("status", "statuses"),
    _suffix("bus", "buses"),
    _suffix("testis", "testes"),
    _suffix("sis", "ses"),
    _suffix("datum", "data"),
    _suffix("stratum", "strata"),
    _suffix("medium", "media"),
    _suffix("bacterium", "bacteria"),
    _suffix("curriculum", "curricula"),
    _suffix("buffalo", "buffaloes"),
    _suffix("tomato", "tomatoes"),
    _suffix("potato", "potatoes"),
    _suffix("hero", "heroes"),
    _suffix("echo", "echoes"),
    _suffix("ch", "ches"),
    _suffix("sh", "shes"),
    _suffix("ss", "sses"),
    _suffix("zz", "zzes"),
    _suffix("x", "xes"),
    _suffix("quy", "quies"),
    _suffix("y", "ies", guard=_consonant_before("y")),
    _suffix("lf", "lves"),
    _suffix("rf", "rves"),
    _suffix("fe", "ves", guard=_not_after("f", "fe")),
    _suffix("tum", "ta"),
    _suffix("ium", "ia"),
    # Words already ending in s are taken to be plural
    _keep("s"),
    _suffix("", "s", fallback=True),
)


@dataclass(frozen=True, slots=True)
class Inflection:
    word: str
    rule: InflectionRule | None

    @property
    def is_fallback(self) -> bool:
        return self.rule is not None and self.rule.fallback


def inflect(word: str, rules: tuple[InflectionRule, ...]) -> Inflection:
    """Apply the first matching rule of ``rules`` to ``word``."""
    if not word:
        return Inflection(word, None)
    for rule in rules:
        if rule.matches(word):
            return Inflection(rule.apply(word), rule)
    return Inflection(word, None)


def singularize(word: str) -> str:
    return inflect(word, SINGULAR_RULES).word


def pluralize(word: str) -> str:
    return inflect(word, PLURAL_RULES).word
