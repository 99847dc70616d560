# site-service/tests/test_listing.py
"""Tests for the filterable listing controller."""

import asyncio

import pytest

from site_service.application.listing import ListingController
from site_service.domain.exceptions import ContentApiError
from site_service.domain.models import ContentKind, FilterState, PaginationMeta, ResultPage

from conftest import make_envelope


def _controller(source, signal, clock, kind=ContentKind.LESSONS, **kwargs):
    return ListingController(
        kind,
        source,
        signal,
        page_size=6,
        search_delay=0.5,
        scheduler=clock,
        **kwargs,
    )


def _initial(pages=5):
    return ResultPage(
        items=[{"id": "initial", "title": "Initial"}],
        pagination=PaginationMeta(total=pages * 6, page=1, pages=pages, limit=6),
    )


class TestRefresh:

    @pytest.mark.asyncio
    async def test_success_replaces_result(self, source, signal, clock):
        source.default = make_envelope(["Prospecting", "Closing"], pages=2, total=8)
        controller = _controller(source, signal, clock)

        assert await controller.refresh() is True

        assert [item["title"] for item in controller.result.items] == ["Prospecting", "Closing"]
        assert controller.result.pagination == PaginationMeta(total=8, page=1, pages=2, limit=6)
        assert controller.loading is False
        assert controller.status == "ok"

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_result(self, source, signal, clock):
        """A 500 leaves items and pagination untouched and clears loading."""
        controller = _controller(source, signal, clock, initial=_initial())
        before = controller.result
        source.responses.append(ContentApiError("Content backend returned 500", status_code=500))

        assert await controller.refresh() is False

        assert controller.result is before
        assert controller.loading is False
        assert controller.status == "error"
        assert "500" in controller.last_error

    @pytest.mark.asyncio
    async def test_malformed_envelope_is_a_failure(self, source, signal, clock):
        controller = _controller(source, signal, clock, initial=_initial())
        source.responses.append({"status": "success", "data": None})

        assert await controller.refresh() is False
        assert controller.result.items == [{"id": "initial", "title": "Initial"}]

    @pytest.mark.asyncio
    async def test_next_success_clears_error(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        source.responses.append(ContentApiError("boom"))
        await controller.refresh()
        await controller.refresh()
        assert controller.last_error is None

    @pytest.mark.asyncio
    async def test_loading_during_request(self, source, signal, clock):
        future = asyncio.get_running_loop().create_future()
        source.responses.append(future)
        controller = _controller(source, signal, clock)

        task = controller.reload()
        await asyncio.sleep(0)
        assert controller.loading is True
        assert controller.status == "loading"

        future.set_result(make_envelope(["A"]))
        await task
        assert controller.loading is False

    @pytest.mark.asyncio
    async def test_empty_result_status(self, source, signal, clock):
        source.default = make_envelope([])
        controller = _controller(source, signal, clock, initial=_initial())
        await controller.refresh()
        assert controller.status == "empty"

    @pytest.mark.asyncio
    async def test_update_callback_sees_loading_then_settled(self, source, signal, clock):
        states = []
        controller = _controller(
            source, signal, clock, on_update=lambda c: states.append(c.loading)
        )
        await controller.refresh()
        assert states == [True, False]


class TestFilterTransitions:
    """Category, level and committed search go back to page 1."""

    @pytest.mark.asyncio
    async def test_each_dimension_resets_page(self, source, signal, clock):
        controller = _controller(source, signal, clock, initial=_initial())

        await controller.go_to(3)
        await controller.set_category("closing")
        assert source.calls[-1]["page"] == 1
        assert source.calls[-1]["category"] == "closing"

        await controller.go_to(4)
        await controller.set_level("Advanced")
        assert source.calls[-1]["page"] == 1
        assert source.calls[-1]["level"] == "Advanced"

        await controller.go_to(2)
        controller.type_search("objections")
        clock.advance(0.5)
        await controller.settle()
        assert source.calls[-1]["page"] == 1
        assert source.calls[-1]["search"] == "objections"
        assert controller.filters == FilterState(
            page=1, category="closing", level="Advanced", search="objections"
        )

    @pytest.mark.asyncio
    async def test_raw_search_does_not_fetch(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        controller.type_search("c")
        controller.type_search("co")
        clock.advance(0.3)
        await controller.settle()
        assert source.calls == []
        assert controller.coalescer.raw == "co"

    @pytest.mark.asyncio
    async def test_committing_same_search_does_not_fetch(self, source, signal, clock):
        controller = _controller(source, signal, clock, filters=FilterState(search="calls"))
        controller.type_search("call")
        controller.type_search("calls")
        clock.advance(0.5)
        await controller.settle()
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_exactly_one_fetch_per_transition(self, source, signal, clock):
        controller = _controller(source, signal, clock, initial=_initial())
        await controller.set_category("closing")
        await controller.set_level("Beginner")
        await controller.go_to(2)
        assert len(source.calls) == 3

    @pytest.mark.asyncio
    async def test_unchanged_value_does_not_fetch(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        assert controller.set_category("") is None
        assert controller.set_level("") is None
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_toggle_category_clears_active(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        await controller.toggle_category("closing")
        await controller.toggle_category("closing")
        assert controller.filters.category == ""
        assert "category" not in source.calls[-1]

    @pytest.mark.asyncio
    async def test_toggle_level_clears_active(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        await controller.toggle_level("Intermediate")
        await controller.toggle_level("Intermediate")
        assert controller.filters.level == ""

    @pytest.mark.asyncio
    async def test_unknown_level_rejected(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        with pytest.raises(ValueError):
            controller.set_level("Expert")
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_articles_have_no_level(self, source, signal, clock):
        controller = _controller(source, signal, clock, kind=ContentKind.ARTICLES)
        with pytest.raises(ValueError):
            controller.set_level("Beginner")
        assert controller.snapshot().levels == []

    @pytest.mark.asyncio
    async def test_clear_filters(self, source, signal, clock):
        controller = _controller(
            source,
            signal,
            clock,
            filters=FilterState(page=3, category="closing", level="Advanced", search="calls"),
        )
        controller.type_search("callsx")

        await controller.clear_filters()
        clock.advance(1)
        await controller.settle()

        assert controller.filters == FilterState()
        assert controller.coalescer.raw == ""
        assert len(source.calls) == 1
        assert source.calls[0] == {
            "kind": ContentKind.LESSONS,
            "page": 1,
            "limit": 6,
            "audience": "english",
        }

    @pytest.mark.asyncio
    async def test_empty_filters_are_not_sent(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        await controller.refresh()
        sent = source.calls[0]
        assert "category" not in sent
        assert "level" not in sent
        assert "search" not in sent


class TestPagination:

    @pytest.mark.asyncio
    async def test_prev_on_first_page_is_noop(self, source, signal, clock):
        scrolled = []
        controller = _controller(
            source, signal, clock, initial=_initial(), on_page_change=scrolled.append
        )
        assert controller.prev_page() is None
        assert source.calls == []
        assert scrolled == []

    @pytest.mark.asyncio
    async def test_next_on_last_page_is_noop(self, source, signal, clock):
        controller = _controller(
            source, signal, clock, filters=FilterState(page=5), initial=_initial(pages=5)
        )
        assert controller.next_page() is None
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_go_to_fetches_once_and_scrolls(self, source, signal, clock):
        scrolled = []
        controller = _controller(
            source, signal, clock, initial=_initial(pages=5), on_page_change=scrolled.append
        )
        source.default = make_envelope(["Page three"], page=3, pages=5, total=30)

        await controller.go_to(3)

        assert controller.page == 3
        assert len(source.calls) == 1
        assert source.calls[0]["page"] == 3
        assert scrolled == [3]

    @pytest.mark.asyncio
    async def test_next_and_prev(self, source, signal, clock):
        controller = _controller(source, signal, clock, initial=_initial(pages=5))
        source.default = make_envelope(["x"], pages=5, total=30)
        await controller.next_page()
        await controller.next_page()
        await controller.prev_page()
        assert [call["page"] for call in source.calls] == [2, 3, 2]

    @pytest.mark.asyncio
    async def test_next_uses_latest_metadata(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        assert controller.next_page() is None
        source.default = make_envelope(["x"], pages=2, total=8)
        await controller.refresh()
        task = controller.next_page()
        assert task is not None
        await task
        assert controller.page == 2

    def test_page_numbers_cover_all_pages(self, source, signal, clock):
        controller = _controller(source, signal, clock, initial=_initial(pages=12))
        assert controller.page_numbers == list(range(1, 13))

    @pytest.mark.asyncio
    async def test_page_below_one_rejected(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        with pytest.raises(ValueError):
            controller.go_to(0)


class TestLocale:

    @pytest.mark.asyncio
    async def test_toggle_changes_only_audience(self, source, signal, clock):
        controller = _controller(
            source,
            signal,
            clock,
            filters=FilterState(page=2, category="closing", level="Beginner", search="calls"),
            initial=_initial(),
        )
        await controller.refresh()

        await signal.toggle()
        await controller.settle()

        before, after = source.calls[-2], source.calls[-1]
        assert before["audience"] == "english"
        assert after["audience"] == "french"
        assert {k: v for k, v in after.items() if k != "audience"} == {
            k: v for k, v in before.items() if k != "audience"
        }
        assert controller.page == 2

    @pytest.mark.asyncio
    async def test_closed_controller_ignores_locale(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        controller.close()
        await signal.set_locale("fr")
        await controller.settle()
        assert source.calls == []


class TestOverlappingRequests:
    """Requests are not cancelled; by default the last settlement wins."""

    @pytest.mark.asyncio
    async def test_stale_response_can_win(self, source, signal, clock):
        loop = asyncio.get_running_loop()
        first, second = loop.create_future(), loop.create_future()
        source.responses.extend([first, second])
        controller = _controller(source, signal, clock, initial=_initial())

        r1 = controller.reload()
        r2 = controller.go_to(2)
        await asyncio.sleep(0)
        assert [call["page"] for call in source.calls] == [1, 2]

        second.set_result(make_envelope(["Page two"], page=2, pages=5))
        await r2
        first.set_result(make_envelope(["Page one"], page=1, pages=5))
        await r1

        assert controller.result.items[0]["title"] == "Page one"
        assert controller.result.pagination.page == 1
        assert controller.page == 2
        assert controller.loading is False

    @pytest.mark.asyncio
    async def test_sequence_guard_discards_stale_response(self, source, signal, clock):
        loop = asyncio.get_running_loop()
        first, second = loop.create_future(), loop.create_future()
        source.responses.extend([first, second])
        controller = _controller(
            source, signal, clock, initial=_initial(), discard_stale_responses=True
        )

        r1 = controller.reload()
        r2 = controller.go_to(2)
        await asyncio.sleep(0)

        second.set_result(make_envelope(["Page two"], page=2, pages=5))
        await r2
        assert controller.loading is False
        first.set_result(make_envelope(["Page one"], page=1, pages=5))
        assert await r1 is False

        assert controller.result.items[0]["title"] == "Page two"

    @pytest.mark.asyncio
    async def test_sequence_guard_keeps_loading_for_latest(self, source, signal, clock):
        loop = asyncio.get_running_loop()
        first, second = loop.create_future(), loop.create_future()
        source.responses.extend([first, second])
        controller = _controller(
            source, signal, clock, initial=_initial(), discard_stale_responses=True
        )

        r1 = controller.reload()
        r2 = controller.go_to(2)
        await asyncio.sleep(0)

        first.set_exception(ContentApiError("late failure"))
        await r1
        assert controller.loading is True
        assert controller.last_error is None

        second.set_result(make_envelope(["Page two"], page=2, pages=5))
        await r2
        assert controller.loading is False


class TestSnapshot:

    @pytest.mark.asyncio
    async def test_snapshot_renders_cards_with_fallbacks(self, source, signal, clock):
        source.default = {
            "status": "success",
            "results": 1,
            "pagination": {"total": 1, "page": 1, "pages": 1, "limit": 6},
            "data": [{"_id": "abc"}],
        }
        controller = _controller(source, signal, clock)
        await controller.refresh()
        controller.type_search("neg")

        snapshot = controller.snapshot()

        card = snapshot.items[0]
        assert card["id"] == "abc"
        assert card["title"] == "Untitled Course"
        assert card["duration"] == "Self-paced"
        assert card["modules"] == 0
        assert snapshot.raw_search == "neg"
        assert snapshot.filters.search == ""
        assert snapshot.levels == ["Beginner", "Intermediate", "Advanced"]
        assert snapshot.page_numbers == [1]

    @pytest.mark.asyncio
    async def test_wrong_typed_item_fields_still_settle(self, source, signal, clock):
        source.default = make_envelope(["Closing"])
        source.default["data"][0].update({
            "duration": 8,
            "title": 1001,
            "categories": [{"_id": "c1", "name": None, "slug": "closing"}],
        })
        updates = []
        controller = _controller(
            source, signal, clock, on_update=lambda c: updates.append(c.snapshot())
        )

        assert await controller.refresh() is True

        settled = updates[-1]
        assert settled.loading is False
        assert settled.status == "ok"
        card = settled.items[0]
        assert card["title"] == "1001"
        assert card["duration"] == "8"
        assert card["categories"] == [{"_id": "c1", "name": "", "slug": "closing"}]

    @pytest.mark.asyncio
    async def test_close_cancels_pending_search(self, source, signal, clock):
        controller = _controller(source, signal, clock)
        controller.type_search("closing")
        controller.close()
        clock.advance(1)
        await controller.settle()
        assert source.calls == []
