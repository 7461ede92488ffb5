"""Tests for claim candidate extraction."""

import pytest

from claim_overlay.domain.models.claim import ClaimCategory, EntityType
from claim_overlay.domain.models.geometry import TextRange
from claim_overlay.domain.models.settings import ExtractionMode
from claim_overlay.domain.services.claim_extractor import (
    ClaimExtractor,
    claim_from_selection,
    extract_entities,
    find_candidates,
    is_complete_sentence,
    sentence_bounds,
)
from claim_overlay.domain.services.text_scanner import TextScanner
from claim_overlay.domain.services.worthiness_scorer import WorthinessScorer

SCENARIO_A = "A new study shows the drug reduces risk by 45% in adults."
RESEARCH_CLAIM = "Researchers found that regular exercise reduces the risk of heart disease by 30 percent."


@pytest.fixture
def extractor(article_page) -> ClaimExtractor:
    """Create an extractor over the sample article's layout."""
    return ClaimExtractor(TextScanner(article_page.layout), WorthinessScorer())


def test_sentence_bounds_expands_to_full_sentence():
    """A match is widened to the sentence that contains it."""
    text = f"Intro text here. {SCENARIO_A} Something else follows."
    index = text.index("45%")

    start, end = sentence_bounds(text, index, index + 3)

    assert text[start:end] == SCENARIO_A


def test_sentence_bounds_ignores_decimal_points():
    """A period inside a number does not end the sentence."""
    text = "The rate was 3.5 percent higher in 2020 than the year before."
    index = text.index("3.5")

    start, end = sentence_bounds(text, index, index + 11)

    assert (start, end) == (0, len(text))


def test_sentence_bounds_trims_leading_conjunction():
    """A leading conjunction before the match is dropped."""
    text = "Sales grew fast. And 45% of stores closed early."
    index = text.index("45%")

    start, end = sentence_bounds(text, index, index + 3)

    assert text[start:end] == "45% of stores closed early."


@pytest.mark.parametrize(
    "text,expected",
    [
        (SCENARIO_A, True),
        ("because 45% of adults reduce their risk.", False),
        ("Which studies show that 45% of adults reduce risk.", False),
        ("A new study shows the drug reduces risk by 45%", False),
    ],
)
def test_is_complete_sentence(text, expected):
    """Sentences must start and end like sentences and not be dependent clauses."""
    assert is_complete_sentence(text) is expected


def test_find_candidates_deduplicates_overlapping_matches():
    """Several patterns hitting one sentence yield one candidate."""
    candidates = find_candidates(SCENARIO_A)

    assert len(candidates) == 1
    assert candidates[0].text == SCENARIO_A
    assert candidates[0].category == ClaimCategory.STATISTIC
    assert (candidates[0].start, candidates[0].end) == (0, len(SCENARIO_A))


def test_find_candidates_skips_short_fragments():
    """Sentences under the minimum length are not candidates."""
    assert find_candidates("Prices rose 45%.") == []


def test_extract_entities():
    """Percentages and known organizations become entities."""
    entities = extract_entities("According to the CDC, 45% of adults and the WHO agree.")

    assert [(e.text, e.type) for e in entities] == [
        ("45%", EntityType.STATISTIC),
        ("CDC", EntityType.ORGANIZATION),
        ("WHO", EntityType.ORGANIZATION),
    ]


def test_extract_article_claims(extractor, article_page):
    """Only visible article claims survive, best score first."""
    detected = extractor.extract(article_page.body, article_page.url)

    assert [item.claim.text for item in detected] == [RESEARCH_CLAIM, SCENARIO_A]
    assert detected[0].worthiness.score == 120
    assert detected[1].worthiness.score == 110
    for item in detected:
        assert item.claim.origin.host == "news.example.com"
        assert item.source_range is not None
        assert item.source_range.text == item.claim.text


def test_extract_skips_ads_hidden_and_chrome(extractor, article_page):
    """Ad containers, hidden elements, nav and footer never yield claims."""
    texts = " ".join(item.claim.text for item in extractor.extract(article_page.body))

    assert "dentists" not in texts
    assert "hidden claims" not in texts
    assert "Subscribe" not in texts
    assert "rights reserved" not in texts


def test_extract_is_deterministic(extractor, article_page):
    """Two scans of an unchanged page accept the same claims."""
    first = [(d.claim.text, d.worthiness.score) for d in extractor.extract(article_page.body)]
    second = [(d.claim.text, d.worthiness.score) for d in extractor.extract(article_page.body)]

    assert first == second


def test_extract_deduplicates_repeated_text(make_page):
    """Repeated claim text is tracked once, at its first occurrence."""
    page = make_page(f"<body><p>{SCENARIO_A}</p><p>{SCENARIO_A}</p></body>")
    extractor = ClaimExtractor(TextScanner(page.layout))

    detected = extractor.extract(page.body)

    assert len(detected) == 1
    first_paragraph = page.body.find_all("p")[0]
    assert detected[0].source_range.segments[0].node is first_paragraph.string


def test_extract_honours_mode(make_page):
    """A borderline sentence is dropped in minimal mode."""
    borderline = "The vaccine has been shown to prevent severe illness in most adults."
    page = make_page(f"<body><p>{borderline}</p></body>")

    moderate = ClaimExtractor(TextScanner(page.layout), WorthinessScorer())
    minimal = ClaimExtractor(TextScanner(page.layout), WorthinessScorer(mode=ExtractionMode.MINIMAL))

    assert len(moderate.extract(page.body)) == 1
    assert minimal.extract(page.body) == []


def test_claim_from_selection(make_page):
    """A selection becomes a manual claim without scoring."""
    page = make_page(f"<body><p>{SCENARIO_A}</p></body>")
    node = page.body.p.string
    selection = TextRange.over(node, 0, len(node))

    detected = claim_from_selection(selection, page.url)

    assert detected is not None
    assert detected.claim.id.startswith("selection_")
    assert detected.claim.text == SCENARIO_A
    assert detected.claim.category == ClaimCategory.STATISTIC
    assert detected.worthiness is None


def test_claim_from_selection_rejects_short_text(make_page):
    """Selections shorter than the minimum are ignored."""
    page = make_page("<body><p>Too short.</p></body>")
    node = page.body.p.string

    assert claim_from_selection(TextRange.over(node, 0, len(node))) is None
