"""Answer normalisation and near-miss classification for typed vocabulary guesses.

A guess is compared with the expected answer in two steps. First an exact
check on a comparison key that ignores case, whitespace, punctuation, digits
and any leading enumeration such as ``"12. "``. When that fails, a set of
independent near-miss rules runs; if any of them fires the guess is
``almost`` correct and the learner is asked to try again, otherwise it is
``incorrect``.

Each rule describes one kind of typing mistake:

* spacing: ``"Guten Morgen"`` typed as ``"GutenMorgen"``
* article: ``"der Hund"`` typed as ``"Hund"`` or ``"die Hund"``
* single edit: one inserted, deleted or substituted letter
* variant characters: ``ä/ö/ü/ß`` typed as ``ae/oe/ue/ss`` or ``a/o/u/s``
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, Tuple

from loguru import logger

from .models import Classification, Correction, NearMissReason, Verdict

ARTICLES: Tuple[str, ...] = (
    "der",
    "die",
    "das",
    "den",
    "dem",
    "des",
    "ein",
    "eine",
    "einen",
    "einem",
    "einer",
    "eines",
)

VARIANT_MAP = {
    "ä": ("ä", "ae", "a"),
    "ö": ("ö", "oe", "o"),
    "ü": ("ü", "ue", "u"),
    "ß": ("ß", "ss", "s"),
}

_PREFIX_SEPARATORS = frozenset(".-–—:()")
_LEADING_DIGITS = re.compile(r"[0-9]+")
_WHITESPACE = re.compile(r"\s+")


def _is_prefix_separator(char: str) -> bool:
    return char.isspace() or char in _PREFIX_SEPARATORS


def strip_number_prefix(value: str) -> str:
    """Drop a leading enumeration like ``"12. "`` or ``"3) "`` from an answer.

    The digit run is only removed when it is followed by whitespace or one of
    ``. - – — : ( )``; ``"3D-Drucker"`` stays untouched. If nothing but the
    prefix is present the trimmed input is returned unchanged.
    """

    trimmed = value.strip()
    if not trimmed:
        return trimmed

    match = _LEADING_DIGITS.match(trimmed)
    if not match:
        return trimmed

    offset = match.end()
    if offset < len(trimmed) and not _is_prefix_separator(trimmed[offset]):
        return trimmed

    while offset < len(trimmed) and _is_prefix_separator(trimmed[offset]):
        offset += 1

    rest = trimmed[offset:].strip()
    return rest or trimmed


def split_article(value: str) -> Tuple[Optional[str], str]:
    """Return ``(article, rest)`` where ``article`` is lower-cased or ``None``."""

    trimmed = value.strip()
    if not trimmed:
        return None, ""

    lowered = trimmed.lower()
    for article in ARTICLES:
        if lowered.startswith(f"{article} "):
            return article, trimmed[len(article):].lstrip()
    return None, trimmed


def strip_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.replace("ß", "ss")


def _is_ignorable(char: str) -> bool:
    category = unicodedata.category(char)
    return char.isspace() or category.startswith("P") or category.startswith("N")


def comparison_key(value: str) -> str:
    """Key used for the exact-match check.

    Case, whitespace, punctuation and digits are ignored. Diacritics are kept so
    that ``"konnen"`` is not accepted outright for ``"können"``.
    """

    text = unicodedata.normalize("NFC", strip_number_prefix(value)).lower()
    return "".join(char for char in text if not _is_ignorable(char))


def levenshtein(a: str, b: str) -> int:
    """Unit-cost edit distance between ``a`` and ``b``."""

    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    row = list(range(len(a) + 1))
    for j in range(1, len(b) + 1):
        prev = row[0]
        row[0] = j
        for i in range(1, len(a) + 1):
            temp = row[i]
            cost = 0 if a[i - 1] == b[j - 1] else 1
            row[i] = min(row[i] + 1, row[i - 1] + 1, prev + cost)
            prev = temp
    return row[len(a)]


def build_variant_pattern(value: str) -> re.Pattern[str]:
    """Regex accepting ``value`` with umlauts/ß spelled in their ASCII variants."""

    pieces: List[str] = []
    for char in value.lower():
        variants = VARIANT_MAP.get(char)
        if variants:
            pieces.append(f"(?:{'|'.join(variants)})")
        else:
            pieces.append(re.escape(char))
    return re.compile("".join(pieces))


@dataclass(frozen=True)
class GuessForms:
    """Pre-computed representations of a guess/expected pair."""

    guess: str
    expected: str
    guess_lower: str
    expected_lower: str
    guess_collapsed: str
    expected_collapsed: str

    @classmethod
    def build(cls, guess: str, expected: str) -> "GuessForms":
        guess_display = strip_number_prefix(guess)
        expected_display = strip_number_prefix(expected)
        guess_lower = guess_display.lower()
        expected_lower = expected_display.lower()
        return cls(
            guess=guess_display,
            expected=expected_display,
            guess_lower=guess_lower,
            expected_lower=expected_lower,
            guess_collapsed=_WHITESPACE.sub("", guess_lower),
            expected_collapsed=_WHITESPACE.sub("", expected_lower),
        )


class NearMissRule(Protocol):
    """Interface shared by the near-miss detectors."""

    name: str
    reason: NearMissReason

    def matches(self, forms: GuessForms) -> bool:  # pragma: no cover - interface definition
        """Return ``True`` when the guess is a near miss of this kind."""


@dataclass
class SpacingRule:
    """Same letters, different whitespace."""

    name: str = "spacing"
    reason: NearMissReason = NearMissReason.MINOR

    def matches(self, forms: GuessForms) -> bool:
        return (
            forms.expected_lower != forms.guess_lower
            and forms.expected_collapsed == forms.guess_collapsed
        )


@dataclass
class ArticleRule:
    """Right noun, wrong or missing article."""

    name: str = "article"
    reason: NearMissReason = NearMissReason.ARTICLE

    def matches(self, forms: GuessForms) -> bool:
        expected_article, expected_rest = split_article(forms.expected)
        if not expected_article:
            return False
        expected_rest_key = comparison_key(expected_rest)
        if not expected_rest_key:
            return False
        guess_article, guess_rest = split_article(forms.guess)
        guess_rest_key = comparison_key(guess_rest if guess_article else forms.guess)
        return expected_rest_key == guess_rest_key and expected_article != (guess_article or "")


@dataclass
class SingleEditRule:
    """Exactly one edit apart once accents are ignored."""

    name: str = "single_edit"
    reason: NearMissReason = NearMissReason.MINOR

    def matches(self, forms: GuessForms) -> bool:
        distance = levenshtein(
            strip_diacritics(forms.expected_collapsed),
            strip_diacritics(forms.guess_collapsed),
        )
        return distance == 1


@dataclass
class VariantSpellingRule:
    """Umlauts and ß typed with their ASCII replacements."""

    name: str = "variant_spelling"
    reason: NearMissReason = NearMissReason.MINOR

    def matches(self, forms: GuessForms) -> bool:
        pattern = build_variant_pattern(forms.expected_collapsed)
        return pattern.fullmatch(forms.guess_collapsed) is not None


def build_default_rules() -> List[NearMissRule]:
    """Return the default near-miss rule set."""

    return [
        SpacingRule(),
        ArticleRule(),
        SingleEditRule(),
        VariantSpellingRule(),
    ]


_DEFAULT_RULES = build_default_rules()


def classify(
    guess: Any,
    expected: Any,
    *,
    rules: Optional[Iterable[NearMissRule]] = None,
) -> Classification:
    """Judge ``guess`` against ``expected``.

    Malformed input (non-string values, a blank expected answer or a blank
    guess) is reported as ``incorrect`` rather than raised.
    """

    if not isinstance(guess, str) or not isinstance(expected, str):
        logger.debug("Rejecting malformed guess", guess_type=type(guess).__name__)
        return Classification(Verdict.INCORRECT)
    if not expected.strip() or not guess.strip():
        return Classification(Verdict.INCORRECT)

    if comparison_key(guess) == comparison_key(expected):
        return Classification(Verdict.CORRECT)

    forms = GuessForms.build(guess, expected)
    fired = [rule for rule in (rules if rules is not None else _DEFAULT_RULES) if rule.matches(forms)]
    if not fired:
        return Classification(Verdict.INCORRECT)

    logger.debug("Near miss detected", rules=[rule.name for rule in fired])
    if any(rule.reason is NearMissReason.ARTICLE for rule in fired):
        return Classification(Verdict.ALMOST, NearMissReason.ARTICLE)
    return Classification(Verdict.ALMOST, NearMissReason.MINOR)


def render_correction(
    guess: str,
    expected: str,
    reason: Optional[NearMissReason] = None,
) -> Correction:
    """Split the expected answer around the part the learner got wrong.

    Characters are compared position by position against the displayed answer,
    ignoring case, so ``"hund"`` for ``"Hunde"`` marks the trailing ``e`` rather
    than the capital ``H``. An article near miss marks the article instead.
    """

    display = strip_number_prefix(expected)
    if reason is NearMissReason.ARTICLE:
        article, _ = split_article(display)
        if article:
            return Correction(before="", highlight=display[: len(article)], after=display[len(article):])
        return Correction(before=display, highlight="", after="")

    guess_value = guess.strip() if isinstance(guess, str) else ""
    limit = min(len(display), len(guess_value))
    mismatch_index = -1
    for index in range(limit):
        if display[index].lower() != guess_value[index].lower():
            mismatch_index = index
            break

    if mismatch_index == -1 and len(display) != len(guess_value):
        mismatch_index = min(limit, max(len(display) - 1, 0))

    if mismatch_index < 0 or mismatch_index >= len(display):
        return Correction(before=display, highlight="", after="")

    return Correction(
        before=display[:mismatch_index],
        highlight=display[mismatch_index],
        after=display[mismatch_index + 1:],
    )


def hint(expected: str, level: int) -> str:
    """Return the first ``level`` characters of the displayed answer."""

    display = strip_number_prefix(expected)
    count = max(0, min(int(level), len(display)))
    return display[:count]


def hint_available(expected: str, level: int, *, solved: bool = False) -> bool:
    return not solved and level < len(strip_number_prefix(expected))


__all__ = [
    "ARTICLES",
    "ArticleRule",
    "GuessForms",
    "NearMissRule",
    "SingleEditRule",
    "SpacingRule",
    "VariantSpellingRule",
    "build_default_rules",
    "build_variant_pattern",
    "classify",
    "comparison_key",
    "hint",
    "hint_available",
    "levenshtein",
    "render_correction",
    "split_article",
    "strip_diacritics",
    "strip_number_prefix",
]
