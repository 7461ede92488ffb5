"""Integration tests for a full page workflow on the offline provider."""

import pytest
import pytest_asyncio

from claim_overlay.domain.models.markers import HIGHLIGHT_CLASS
from claim_overlay.domain.models.verification import RATING_LABELS
from claim_overlay.domain.services.overlay_renderer import parse_marker_style
from claim_overlay.infrastructure.dependencies import ServiceContainer
from claim_overlay.infrastructure.settings.env_settings import AppConfig
from claim_overlay.main import main

SCENARIO_A = "A new study shows the drug reduces risk by 45% in adults."
RESEARCH_CLAIM = "Researchers found that regular exercise reduces the risk of heart disease by 30 percent."


@pytest_asyncio.fixture
async def container():
    """Create a service container on the mock provider."""
    container = ServiceContainer(AppConfig())
    yield container
    await container.shutdown()


def _tops(page):
    return sorted(parse_marker_style(marker)["top"] for marker in page.soup.find_all(class_=HIGHLIGHT_CLASS))


@pytest.mark.asyncio
async def test_complete_page_workflow(container, article_page, scheduler):
    """Scan, verify, follow a layout change and show a tooltip."""
    session = await container.create_session(article_page, scheduler)
    assert session.start()

    # Initial scan after the start-up delay
    scheduler.advance(1.0)
    await session.wait_for_verifications()

    tracked = {claim.claim_text: claim for claim in session.registry}
    assert set(tracked) == {SCENARIO_A, RESEARCH_CLAIM}
    assert all(claim.is_verified for claim in tracked.values())
    assert session.sink.badge_text == "2"
    assert _tops(article_page) == ["40px", "60px"]

    # Content inserted above the article moves every marker down one line
    paragraph = article_page.new_tag("p")
    paragraph.string = "Breaking: live updates follow below."
    article_page.insert_before(article_page.body.article.h1, paragraph)
    scheduler.advance(0.5)
    assert _tops(article_page) == ["60px", "80px"]

    # Hovering a marker shows the verification in the tooltip
    claim = tracked[SCENARIO_A]
    article_page.pointer_enter(claim.overlays[0])
    assert session.tooltip.is_showing
    assert RATING_LABELS[claim.rating] in session.tooltip.element.get_text()

    session.teardown()
    assert article_page.soup.find(class_=HIGHLIGHT_CLASS) is None


@pytest.mark.asyncio
async def test_messages_drive_the_session(container, article_page, scheduler):
    """The command surface scans and lists claims."""
    session = await container.create_session(article_page, scheduler)
    session.start(auto_scan=False)

    response = await session.handle_message({"type": "SCAN_PAGE"})
    await session.wait_for_verifications()
    listed = await session.handle_message({"type": "GET_PAGE_CLAIMS"})

    assert response == {"success": True, "claimCount": 2}
    assert listed["success"] is True
    assert {item["claim_text"] for item in listed["claims"]} == {SCENARIO_A, RESEARCH_CLAIM}


def test_cli_prints_claims(tmp_path, capsys):
    """The command line scans a saved page and prints ratings."""
    page_file = tmp_path / "article.html"
    page_file.write_text(f"<html><body><p>{SCENARIO_A}</p></body></html>", encoding="utf-8")

    exit_code = main([str(page_file), "--url", "https://news.example.com/a", "--verify", "--provider", "mock"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Found 1 claims on https://news.example.com/a" in output
    assert SCENARIO_A in output
    assert "Rects: (0,0 456x20)" in output
    assert "Rating:" in output
