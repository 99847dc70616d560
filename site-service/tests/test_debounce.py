# site-service/tests/test_debounce.py
"""Tests for the search input debounce."""

import pytest

from site_service.application.debounce import SearchCoalescer


def _coalescer(clock, delay=0.5):
    commits = []
    coalescer = SearchCoalescer(
        lambda value: commits.append((clock.now, value)),
        delay=delay,
        scheduler=clock,
    )
    return coalescer, commits


def test_burst_commits_once_after_quiet_period(clock):
    """Keystrokes at 0, 100, 200 and 450ms commit once, at 950ms."""
    coalescer, commits = _coalescer(clock)

    for at, text in [(0.0, "n"), (0.1, "ne"), (0.2, "neg"), (0.45, "nego")]:
        clock.advance_to(at)
        coalescer.push(text)

    clock.advance_to(0.949)
    assert commits == []

    clock.advance_to(2.0)
    assert commits == [(pytest.approx(0.95), "nego")]
    assert coalescer.committed == "nego"
    assert not coalescer.pending


def test_raw_value_updates_immediately(clock):
    coalescer, commits = _coalescer(clock)
    coalescer.push("clo")
    assert coalescer.raw == "clo"
    assert coalescer.committed == ""
    assert coalescer.pending
    assert commits == []


def test_separate_bursts_commit_separately(clock):
    coalescer, commits = _coalescer(clock)
    coalescer.push("a")
    clock.advance(0.6)
    coalescer.push("ab")
    clock.advance(0.6)
    assert [value for _, value in commits] == ["a", "ab"]


def test_cancel_prevents_commit(clock):
    coalescer, commits = _coalescer(clock)
    coalescer.push("closing")
    coalescer.cancel()
    clock.advance(5)
    assert commits == []
    assert not coalescer.pending


def test_reset_sets_both_values_silently(clock):
    coalescer, commits = _coalescer(clock)
    coalescer.push("pending")
    coalescer.reset("")
    clock.advance(1)
    assert coalescer.raw == ""
    assert coalescer.committed == ""
    assert commits == []


def test_negative_delay_rejected(clock):
    with pytest.raises(ValueError):
        SearchCoalescer(lambda value: None, delay=-1, scheduler=clock)


@pytest.mark.asyncio
async def test_defaults_to_running_event_loop():
    import asyncio

    committed = asyncio.Event()
    values = []

    def on_commit(value):
        values.append(value)
        committed.set()

    coalescer = SearchCoalescer(on_commit, delay=0.01)
    coalescer.push("prospecting")
    await asyncio.wait_for(committed.wait(), timeout=1)
    assert values == ["prospecting"]
