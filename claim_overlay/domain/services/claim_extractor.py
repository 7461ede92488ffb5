"""Claim candidate extraction: pattern matching, sentence expansion, scoring."""

import logging
import re
from typing import Iterable, List, Optional, Pattern, Tuple

from bs4 import Tag

from ..models.claim import (
    CandidateSpan,
    Claim,
    ClaimCategory,
    ClaimOrigin,
    DetectedClaim,
    Entity,
    EntityType,
    generate_claim_id,
    normalize_claim_text,
)
from ..models.geometry import TextRange
from .claim_patterns import (
    ASSERTION_PATTERNS,
    ORGANIZATION_PATTERN,
    PERCENT_PATTERN,
    QUOTE_PATTERNS,
    STATISTIC_PATTERNS,
)
from .text_scanner import TextScanner, TextUnit
from .worthiness_scorer import WorthinessScorer

logger = logging.getLogger(__name__)

MIN_SPAN_LENGTH = 40
MAX_SPAN_LENGTH = 400
MIN_SELECTION_LENGTH = 20

CLOSING_MARKS = "\"”'’)]"
LEADING_DEBRIS = "•·-–—*>)]|:;,"

SUBORDINATE_STARTS = frozenset({
    "and", "but", "or", "nor", "so", "yet", "because", "although", "though", "whereas",
    "which", "who", "whom", "whose", "that", "unless", "while", "if", "whether", "plus", "also",
})

_LEADING_CONJUNCTION = re.compile(r"^(?:and|but|or|so|yet|nor|plus|also)\s+(?=[A-Z0-9\"“])", re.IGNORECASE)
_LEADING_RELATIVE_CLAUSE = re.compile(
    r"^(?:and|but|or|so|yet|which|who|that|where|while|whereas)\b[^.!?,]{0,80},\s*(?=[A-Z0-9\"“])",
    re.IGNORECASE,
)
_FIRST_WORD = re.compile(r"[A-Za-z']+")
_COMPLETE_START = re.compile(r"^[A-Z0-9\"“‘']")
_COMPLETE_END = re.compile(r"[.!?][\"”'’)\]]*$")


def _is_terminator(text: str, index: int) -> bool:
    """A full stop only ends a sentence when followed by space, a closing mark or the end."""
    char = text[index]
    if char in "!?\n":
        return True
    if char == ".":
        following = text[index + 1] if index + 1 < len(text) else ""
        return following == "" or following.isspace() or following in CLOSING_MARKS
    return False


def sentence_bounds(text: str, match_start: int, match_end: int) -> Tuple[int, int]:
    """Expand a match to the enclosing sentence and trim leading fragments."""
    start = match_start
    while start > 0 and not _is_terminator(text, start - 1):
        start -= 1
    end = match_end
    while end < len(text) and not _is_terminator(text, end):
        end += 1
    if end < len(text) and text[end] in ".!?":
        end += 1
        while end < len(text) and text[end] in CLOSING_MARKS:
            end += 1

    while start < match_start and (text[start].isspace() or text[start] in LEADING_DEBRIS):
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1

    for pattern in (_LEADING_RELATIVE_CLAUSE, _LEADING_CONJUNCTION):
        trimmed = pattern.match(text, start)
        if trimmed and trimmed.end() <= match_start:
            start = trimmed.end()
            break
    return start, end


def is_complete_sentence(text: str) -> bool:
    """Starts like a sentence, ends like one, and is not a dependent clause."""
    if not _COMPLETE_START.match(text) or not _COMPLETE_END.search(text):
        return False
    first = _FIRST_WORD.search(text)
    return not (first and first.group(0).lower() in SUBORDINATE_STARTS)


def extract_entities(text: str) -> List[Entity]:
    """Percentages and well-known health organizations mentioned in a claim."""
    entities = [Entity(text=match.group(0), type=EntityType.STATISTIC) for match in PERCENT_PATTERN.finditer(text)]
    entities.extend(
        Entity(text=match.group(0), type=EntityType.ORGANIZATION) for match in ORGANIZATION_PATTERN.finditer(text)
    )
    return entities


def find_candidates(text: str, unit_index: int = 0) -> List[CandidateSpan]:
    """Apply every pattern family to one text unit.

    Args:
        text: Text of the unit
        unit_index: Position of the unit in scan order

    Returns:
        Candidate spans in family order, statistics first
    """
    families: Iterable[Tuple[ClaimCategory, List[Pattern[str]]]] = (
        (ClaimCategory.STATISTIC, STATISTIC_PATTERNS),
        (ClaimCategory.QUOTED_ATTRIBUTION, QUOTE_PATTERNS),
        (ClaimCategory.ASSERTION, ASSERTION_PATTERNS),
    )
    candidates: List[CandidateSpan] = []
    seen = set()
    for category, patterns in families:
        for pattern in patterns:
            for match in pattern.finditer(text):
                start, end = sentence_bounds(text, match.start(), match.end())
                if (start, end) in seen:
                    continue
                sentence = text[start:end]
                if not MIN_SPAN_LENGTH <= len(sentence) <= MAX_SPAN_LENGTH:
                    continue
                if not is_complete_sentence(sentence):
                    continue
                seen.add((start, end))
                candidates.append(CandidateSpan(
                    text=sentence,
                    unit_index=unit_index,
                    start=start,
                    end=end,
                    category=category,
                    pattern=pattern.pattern,
                ))
    return candidates


class ClaimExtractor:
    """Turns page text into a ranked set of verifiable claims."""

    def __init__(self, scanner: TextScanner, scorer: Optional[WorthinessScorer] = None):
        self._scanner = scanner
        self._scorer = scorer or WorthinessScorer()

    @property
    def scorer(self) -> WorthinessScorer:
        return self._scorer

    def extract(self, root: Tag, url: str = "") -> List[DetectedClaim]:
        """Scan a subtree and return accepted claims, best score first.

        Args:
            root: Subtree to scan, usually the document body
            url: Page URL recorded as the claim origin

        Returns:
            Deduplicated claims with their capture ranges
        """
        origin = ClaimOrigin.from_url(url)
        detected: List[DetectedClaim] = []
        seen = set()
        units = 0
        candidates = 0

        for unit in self._scanner.iter_text_units(root):
            units += 1
            for candidate in find_candidates(unit.text, unit.index):
                candidates += 1
                key = normalize_claim_text(candidate.text)
                if key in seen:
                    continue
                result = self._scorer.score(candidate.text)
                if not result.passed:
                    continue
                seen.add(key)
                claim = Claim(
                    text=candidate.text,
                    normalized_text=key,
                    category=candidate.category,
                    entities=extract_entities(candidate.text),
                    origin=origin,
                )
                detected.append(DetectedClaim(claim, self._range_for(unit, candidate), result))

        # Stable sort keeps document order among equal scores
        detected.sort(key=lambda item: -item.worthiness.score)
        logger.info(f"🔍 Scanned {units} text units, {candidates} candidates, {len(detected)} claims accepted")
        return detected

    def _range_for(self, unit: TextUnit, candidate: CandidateSpan) -> Optional[TextRange]:
        try:
            return TextRange.over(unit.node, candidate.start, candidate.end)
        except ValueError as e:
            logger.debug(f"Could not build range for candidate: {e}")
            return None


def claim_from_selection(
    selection: TextRange,
    url: str = "",
    claim_id: Optional[str] = None,
) -> Optional[DetectedClaim]:
    """Build a manual claim from a user selection; no scoring is applied."""
    text = " ".join(selection.text.split())
    if len(text) < MIN_SELECTION_LENGTH:
        return None
    claim = Claim(
        id=claim_id or generate_claim_id("selection"),
        text=text,
        category=ClaimCategory.STATISTIC if PERCENT_PATTERN.search(text) else ClaimCategory.OTHER,
        entities=extract_entities(text),
        origin=ClaimOrigin.from_url(url),
    )
    return DetectedClaim(claim, selection)
