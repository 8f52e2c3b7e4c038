# File: tests/test_frontier.py
import asyncio
import random

import pytest

from site_mirror.frontier import EnqueueResult, Frontier, Label, Request


def drain(frontier: Frontier) -> list[Request]:
    out = []
    while (req := frontier.dequeue_nowait()) is not None:
        out.append(req)
        frontier.task_done()
    return out


def test_fifo_discovery_order():
    frontier = Frontier(budget=10)
    for url in ("https://ex.com/a", "https://ex.com/b", "https://ex.com/c"):
        assert frontier.enqueue(url, Label.HTML) is EnqueueResult.ACCEPTED
    assert frontier.pending == 3
    assert [r.url for r in drain(frontier)] == ["https://ex.com/a", "https://ex.com/b", "https://ex.com/c"]


def test_duplicate_is_rejected_regardless_of_label():
    frontier = Frontier(budget=10)
    assert frontier.enqueue("https://ex.com/logo.png", Label.IMAGE) is EnqueueResult.ACCEPTED
    assert frontier.enqueue("https://ex.com/logo.png", Label.HTML) is EnqueueResult.DUPLICATE
    reqs = drain(frontier)
    assert reqs == [Request("https://ex.com/logo.png", Label.IMAGE)]
    # still a duplicate after it was dispatched
    assert frontier.enqueue("https://ex.com/logo.png", Label.IMAGE) is EnqueueResult.DUPLICATE


def test_budget_drops_silently_and_duplicates_cost_nothing():
    frontier = Frontier(budget=2)
    assert frontier.enqueue("https://ex.com/1") is EnqueueResult.ACCEPTED
    assert frontier.enqueue("https://ex.com/1") is EnqueueResult.DUPLICATE
    assert frontier.remaining_budget() == 1
    assert frontier.enqueue("https://ex.com/2") is EnqueueResult.ACCEPTED
    assert frontier.enqueue("https://ex.com/3") is EnqueueResult.BUDGET_EXCEEDED
    assert frontier.remaining_budget() == 0
    assert "https://ex.com/3" not in frontier
    assert frontier.dropped == 1
    assert frontier.duplicates == 1
    assert len(drain(frontier)) == 2


def test_random_enqueue_sequences_keep_invariants():
    rng = random.Random(7)
    urls = [f"https://ex.com/p{i}" for i in range(40)]
    frontier = Frontier(budget=25)
    for _ in range(500):
        frontier.enqueue(rng.choice(urls), rng.choice(list(Label)))
    dispatched = [r.url for r in drain(frontier)]
    assert len(dispatched) == len(set(dispatched))
    assert len(dispatched) <= 25
    assert frontier.dispatched == len(dispatched)


def test_dequeue_nowait_signals_empty():
    assert Frontier().dequeue_nowait() is None


def test_budget_must_be_positive():
    with pytest.raises(ValueError):
        Frontier(budget=0)


@pytest.mark.asyncio()
async def test_concurrent_enqueues_accept_once():
    frontier = Frontier(budget=100)
    results = []

    async def producer():
        for i in range(20):
            results.append(frontier.enqueue(f"https://ex.com/{i}", Label.HTML))
            await asyncio.sleep(0)

    await asyncio.gather(*(producer() for _ in range(5)))
    assert results.count(EnqueueResult.ACCEPTED) == 20
    assert results.count(EnqueueResult.DUPLICATE) == 80


@pytest.mark.asyncio()
async def test_join_waits_for_task_done():
    frontier = Frontier()
    frontier.enqueue("https://ex.com/")
    request = await frontier.dequeue()
    joiner = asyncio.create_task(frontier.join())
    await asyncio.sleep(0)
    assert not joiner.done()
    frontier.enqueue(request.url + "next.html")
    frontier.task_done()
    await asyncio.sleep(0)
    assert not joiner.done()
    drain(frontier)
    await asyncio.wait_for(joiner, timeout=1)
