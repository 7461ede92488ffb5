"""Heuristic scoring of candidate spans for claim-worthiness."""

import logging
import re
from typing import List, Optional, Pattern

from ..models.settings import ExtractionMode, ScoringWeights
from ..models.worthiness import WorthinessResult
from .claim_patterns import AUTHORITY_PATTERN, TRIGGER_SIGNAL_PATTERNS

logger = logging.getLogger(__name__)

JUNK_PATTERNS: List[Pattern[str]] = [
    # UI chrome
    re.compile(r"\b(?:click|tap)\s+(?:here|below|to)\b", re.IGNORECASE),
    re.compile(
        r"^\s*(?:read|show|load|see|view) (?:more|all|less)\b|\b(?:read|show|load|view) (?:more|all|less)\W*$",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:sign\s*(?:in|up)|log\s*(?:in|out)|create an account)\b", re.IGNORECASE),
    re.compile(r"\bsubscribe\b|\bnewsletter\b|\bunsubscribe\b", re.IGNORECASE),
    re.compile(r"\b(?:skip to|back to top|jump to)\b", re.IGNORECASE),
    re.compile(r"\bfollow us\b|\bshare (?:this|on)\b|\blike us on\b", re.IGNORECASE),
    re.compile(r"\bcookies?\b.*\b(?:accept|consent|policy|settings|preferences|use)\b", re.IGNORECASE),
    re.compile(r"\bjavascript (?:is )?(?:disabled|required)\b|\benable javascript\b", re.IGNORECASE),
    # Metadata
    re.compile(r"^\s*(?:posted|published|updated|last updated|modified)\s*(?:on\b|at\b|:|\d)", re.IGNORECASE),
    re.compile(r"\b\d+\s*min(?:ute)?s?\s+read\b", re.IGNORECASE),
    re.compile(r"^\s*\d[\d,.]*\s*(?:comments?|shares?|views?|likes?|replies)\b", re.IGNORECASE),
    re.compile(r"\b(?:tags?|categories|filed under)\s*:", re.IGNORECASE),
    # Ads and clickbait
    re.compile(r"\b(?:sponsored|advertisement|advertorial|paid (?:post|content)|promoted)\b", re.IGNORECASE),
    re.compile(r"\byou won'?t believe\b|\bthis one (?:weird )?trick\b|\b\w+ hate (?:him|her|this)\b", re.IGNORECASE),
    re.compile(r"\b(?:buy|shop|order|download|install) now\b|\bfree (?:shipping|trial)\b", re.IGNORECASE),
    re.compile(r"\blimited[- ]time\b|\bsale ends\b|\b\d+% off\b|\bpromo code\b|\bcoupon\b", re.IGNORECASE),
    # Legal boilerplate
    re.compile(r"\ball rights reserved\b|©|\(c\)\s*\d{4}|\bcopyright\b", re.IGNORECASE),
    re.compile(r"\bterms (?:of (?:use|service)|and conditions)\b|\bprivacy (?:policy|notice)\b", re.IGNORECASE),
    re.compile(r"\b(?:affiliate links?|we may earn (?:a )?commission|not (?:medical|financial) advice)\b", re.IGNORECASE),
    # Form labels
    re.compile(
        r"^\s*(?:e-?mail|password|username|first name|last name|full name|phone|zip|postal code|"
        r"address|city|country)(?:\s+address)?\s*[:*]?\s*$",
        re.IGNORECASE,
    ),
    re.compile(r"\brequired fields?\b|\benter your\b|\bforgot (?:your )?password\b", re.IGNORECASE),
    # Bylines
    re.compile(r"^\s*[Bb]y\s+[A-Z][a-z]+(?:\s+[A-Z]\.)?\s+[A-Z][a-z]+", re.UNICODE),
    re.compile(r"^\s*(?:written|reported|edited|reviewed)\s+by\b", re.IGNORECASE),
    # Media credits
    re.compile(r"\b(?:photo|image|video|illustration|graphic)\s*(?:by|credit|courtesy|:)", re.IGNORECASE),
    re.compile(r"\b(?:getty images|shutterstock|istock|ap photo|reuters/|afp via)\b", re.IGNORECASE),
    # Code fragments
    re.compile(r"\bfunction\s*\(|=>|\b(?:var|const|let)\s+\w+\s*=|</?[a-z]+[^>]*>|[{};]\s*$"),
    # Short fragments without terminal punctuation
    re.compile(r"^[^.!?]{0,60}$"),
]

STATISTIC_SIGNAL_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\d+(?:\.\d+)?\s*(?:%|percent\b)", re.IGNORECASE),
    re.compile(
        r"\d[\d,.]*\s*(?:million|billion|trillion|thousand|people|patients|cases|deaths|adults|children|"
        r"women|men|users|participants|years|months|weeks|days|times|fold|dollars|euros)\b",
        re.IGNORECASE,
    ),
    re.compile(r"[$€£]\s?\d"),
    re.compile(r"\b\d+\s*(?:out of|in)\s*\d+\b", re.IGNORECASE),
]

VERB_PATTERN = re.compile(
    r"\b(?:is|are|was|were|be|been|being|has|have|had|does|did|will|would|can|could|may|might|must|"
    r"should|shows?|showed|found|finds|say|says|said|reported|reports|suggests?|reveals?|indicates?|"
    r"causes?|caused|prevents?|reduces?|reduced|increases?|increased|rose|fell|grew|dropped|doubled|"
    r"linked|kills?|killed|affects?|affected|contains?|leads?|led|makes?|made|costs?|accounts?)\b"
    r"|\b\w{3,}(?:ed|es)\b",
    re.IGNORECASE,
)

IMPERATIVE_OPENING = re.compile(
    r"^\s*(?:click|tap|subscribe|sign|join|get|buy|try|learn|discover|find|read|watch|see|check|"
    r"download|share|follow|call|visit|register|order|shop|save|don'?t|do|make|take|let'?s?|start|stop|"
    r"enter|contact|imagine|remember|consider|please|go|upgrade|book)\b",
    re.IGNORECASE,
)

FIRST_PERSON_OPENING = re.compile(
    r"^\s*[\"“']?(?:i|i'm|i've|i'd|i'll|we|we're|we've|we'll|my|our|me|us)\b",
    re.IGNORECASE,
)

ELLIPSIS = re.compile(r"\.\.\.|…")
TERMINAL_PUNCTUATION = re.compile(r"[.!?][\"”'’)\]]*\s*$")

# Structural signals; content signals are what the gate requires.
STRUCTURAL_SIGNALS = frozenset({"verb_structure", "substantive_length"})


class WorthinessScorer:
    """Scores candidate spans; identical input always yields the same result."""

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        mode: ExtractionMode = ExtractionMode.MODERATE,
    ):
        self._weights = weights or ScoringWeights()
        self._mode = mode

    @property
    def weights(self) -> ScoringWeights:
        return self._weights

    @property
    def mode(self) -> ExtractionMode:
        return self._mode

    @mode.setter
    def mode(self, mode: ExtractionMode) -> None:
        self._mode = mode

    @property
    def threshold(self) -> int:
        return self._weights.threshold_for(self._mode)

    def is_junk(self, text: str) -> bool:
        """Whether the text matches any junk pattern."""
        return any(pattern.search(text) for pattern in JUNK_PATTERNS)

    def score(self, text: str) -> WorthinessResult:
        """Score a candidate span.

        Args:
            text: Candidate sentence

        Returns:
            Score, pass/fail decision and the reasons behind it
        """
        w = self._weights
        text = text.strip()
        if not text:
            return WorthinessResult.rejected("empty text")

        for pattern in JUNK_PATTERNS:
            if pattern.search(text):
                return WorthinessResult.rejected(f"junk pattern: {pattern.pattern[:40]}")

        digits = sum(1 for char in text if char.isdigit())
        if digits / len(text) > w.max_digit_ratio:
            return WorthinessResult.rejected("digit ratio too high (tabular data)")

        score = 0
        reasons: List[str] = []
        signals: List[str] = []

        def add(signal: str, points: int, reason: str) -> None:
            nonlocal score
            score += points
            signals.append(signal)
            reasons.append(f"{reason} ({points:+d})")

        def penalize(points: int, reason: str) -> None:
            nonlocal score
            score += points
            reasons.append(f"{reason} ({points:+d})")

        if VERB_PATTERN.search(text):
            add("verb_structure", w.verb_structure, "verb-bearing structure")
        if any(pattern.search(text) for pattern in STATISTIC_SIGNAL_PATTERNS):
            add("statistic", w.statistic_with_unit, "statistic with unit")
        elif digits:
            add("digits", w.bare_digits, "contains digits")
        if AUTHORITY_PATTERN.search(text):
            add("authority", w.authoritative_entity, "authoritative entity")
        if any(pattern.search(text) for pattern in TRIGGER_SIGNAL_PATTERNS):
            add("trigger", w.trigger_phrase, "claim-trigger phrase")
        if w.substantive_min_length <= len(text) <= w.substantive_max_length:
            add("substantive_length", w.substantive_length, "substantive length")

        if not TERMINAL_PUNCTUATION.search(text):
            penalize(w.no_terminal_punctuation, "no terminal punctuation")
        if "?" in text:
            penalize(w.question, "question")
        if IMPERATIVE_OPENING.search(text):
            penalize(w.imperative_opening, "imperative opening")
        if FIRST_PERSON_OPENING.search(text):
            penalize(w.first_person_opening, "first-person opening")
        if ELLIPSIS.search(text):
            penalize(w.ellipsis, "ellipsis")
        letters = [char for char in text if char.isalpha()]
        if letters and sum(1 for char in letters if char.isupper()) / len(letters) > w.max_caps_ratio:
            penalize(w.shouting, "capitalization ratio")

        if not any(signal not in STRUCTURAL_SIGNALS for signal in signals):
            reasons.append("no content signal")
            return WorthinessResult(score=score, passed=False, reasons=reasons, signals=signals)

        passed = score >= self.threshold
        logger.debug(f"Scored {score} (threshold {self.threshold}) for: {text[:60]}")
        return WorthinessResult(score=score, passed=passed, reasons=reasons, signals=signals)
