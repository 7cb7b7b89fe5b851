"""Tests for the in-memory document and the Playwright-backed document."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from flightco2.config import Settings
from flightco2.scrapers.browser import (
    ANNOTATE_JS,
    IS_ANNOTATED_JS,
    MUTATION_BINDING,
    OBSERVE_JS,
    PlaywrightDocument,
)
from flightco2.scrapers.documents import ANNOTATION_CLASS, ANNOTATION_STYLE, SoupDocument
from tests.conftest import AF_CARD, CDG_LTN_CARD, ONE_AIRPORT_CARD, results_page

SELECTORS = Settings().flight_selectors


class TestSoupDocument:

    @pytest.mark.asyncio
    async def test_candidates_match_all_selectors(self):
        document = SoupDocument(results_page(CDG_LTN_CARD, AF_CARD, ONE_AIRPORT_CARD, "<div class='ad'>CDG LTN</div>"))
        ids = [element["id"] for element in await document.candidates(SELECTORS)]
        assert ids == ["cdg-ltn", "cdg-mad", "one-airport"]

    @pytest.mark.asyncio
    async def test_annotate_once(self):
        document = SoupDocument(results_page(CDG_LTN_CARD))
        [card] = await document.candidates(SELECTORS)

        assert await document.is_annotated(card) is False
        assert await document.annotate(card, "🌍 CO₂ : 146.0 kg/passager") is True
        assert await document.annotate(card, "🌍 CO₂ : 1.0 kg/passager") is False

        notes = card.select(f".{ANNOTATION_CLASS}")
        assert len(notes) == 1
        assert notes[0].get_text() == "🌍 CO₂ : 146.0 kg/passager"
        assert "color: green" in notes[0]["style"]
        assert await document.is_annotated(card) is True

    @pytest.mark.asyncio
    async def test_annotation_appended_last(self):
        document = SoupDocument(results_page(CDG_LTN_CARD))
        [card] = await document.candidates(SELECTORS)
        await document.annotate(card, "label")
        children = [child for child in card.children if getattr(child, "name", None)]
        assert ANNOTATION_CLASS in children[-1]["class"]

    @pytest.mark.asyncio
    async def test_snapshot_is_detached_copy(self):
        document = SoupDocument(results_page(CDG_LTN_CARD))
        [card] = await document.candidates(SELECTORS)
        snapshot = await document.snapshot(card)
        await document.annotate(card, "label")
        assert ANNOTATION_CLASS not in snapshot

    @pytest.mark.asyncio
    async def test_mutations_notify_observers(self):
        document = SoupDocument(results_page())
        callback = MagicMock()
        await document.observe(callback)

        added = document.insert_html("#results", CDG_LTN_CARD.strip())
        assert added["id"] == "cdg-ltn"
        assert document.remove("#cdg-ltn") == 1
        assert document.remove("#missing") == 0

        assert callback.call_count == 2

    @pytest.mark.asyncio
    async def test_insert_into_missing_parent(self):
        document = SoupDocument(results_page())
        assert document.insert_html("#nowhere", CDG_LTN_CARD) is None

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_block_others(self):
        document = SoupDocument(results_page())
        good = MagicMock()
        await document.observe(MagicMock(side_effect=RuntimeError("boom")))
        await document.observe(good)
        document.insert_html("#results", AF_CARD)
        good.assert_called_once()

    @pytest.mark.asyncio
    async def test_wait_until_loaded_deferred(self):
        document = SoupDocument(results_page(), loaded=False)
        waiter = asyncio.create_task(document.wait_until_loaded())
        await asyncio.sleep(0.01)
        assert not waiter.done()

        document.mark_loaded()
        await asyncio.wait_for(waiter, timeout=1)
        assert document.is_loaded

    @pytest.mark.asyncio
    async def test_release_is_noop(self):
        document = SoupDocument(results_page(CDG_LTN_CARD))
        [card] = await document.candidates(SELECTORS)
        await document.release(card)
        assert await document.candidates(SELECTORS) == [card]


class TestPlaywrightDocument:

    @pytest.mark.asyncio
    async def test_candidates_query(self):
        page = MagicMock()
        page.query_selector_all = AsyncMock(return_value=["a", "b"])
        document = PlaywrightDocument(page)

        assert await document.candidates(SELECTORS) == ["a", "b"]
        page.query_selector_all.assert_awaited_once_with(
            '.css-gzf2z3, .css-kkzho4, [data-testid="flight-card"]'
        )

    @pytest.mark.asyncio
    async def test_annotate_runs_in_page(self):
        element = MagicMock()
        element.evaluate = AsyncMock(return_value=True)
        document = PlaywrightDocument(MagicMock())

        assert await document.annotate(element, "label") is True
        element.evaluate.assert_awaited_once_with(
            ANNOTATE_JS,
            {"marker": ANNOTATION_CLASS, "label": "label", "style": ANNOTATION_STYLE},
        )

    @pytest.mark.asyncio
    async def test_is_annotated_creates_no_handle(self):
        element = MagicMock()
        element.evaluate = AsyncMock(return_value=False)
        element.query_selector = AsyncMock()
        document = PlaywrightDocument(MagicMock())

        assert await document.is_annotated(element) is False
        element.evaluate.assert_awaited_once_with(IS_ANNOTATED_JS, ANNOTATION_CLASS)
        element.query_selector.assert_not_called()

    @pytest.mark.asyncio
    async def test_release_disposes_handle(self):
        element = MagicMock()
        element.dispose = AsyncMock()
        await PlaywrightDocument(MagicMock()).release(element)
        element.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_release_tolerates_detached_handle(self):
        element = MagicMock()
        element.dispose = AsyncMock(side_effect=RuntimeError("Target closed"))
        await PlaywrightDocument(MagicMock()).release(element)  # must not raise

    @pytest.mark.asyncio
    async def test_observe_installs_once(self):
        page = MagicMock()
        page.expose_function = AsyncMock()
        page.evaluate = AsyncMock()
        document = PlaywrightDocument(page)
        callback = MagicMock()

        await document.observe(callback)
        await document.observe(callback)

        page.expose_function.assert_awaited_once_with(MUTATION_BINDING, callback)
        page.evaluate.assert_awaited_once_with(OBSERVE_JS, MUTATION_BINDING)

    @pytest.mark.asyncio
    async def test_wait_until_loaded(self):
        page = MagicMock()
        page.wait_for_load_state = AsyncMock()
        await PlaywrightDocument(page).wait_until_loaded()
        page.wait_for_load_state.assert_awaited_once_with("load")
