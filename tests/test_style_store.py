"""Tests for the durable style batch store."""

from datetime import datetime

import pytest

from huluhulu_ai.models.style import Style, StyleBatch
from huluhulu_ai.storage.style_store import new_batch_id


def _batch(catalogue, *titles):
    return StyleBatch(
        batch_id=new_batch_id(),
        catalogue=catalogue,
        items=[Style(title=t, prompt=f"{t} prompt", source=[f"{t}热搜"]) for t in titles],
        created_at=datetime.now(),
    )


def test_batch_ids_are_strictly_increasing():
    ids = [int(new_batch_id()) for _ in range(50)]
    assert ids == sorted(set(ids))


def test_latest_batch_is_the_most_recent_write(store):
    assert store.latest_batch("photography") is None

    store.save_batch(_batch("photography", "国风", "港风"))
    second = _batch("photography", "赛博朋克")
    assert store.save_batch(second) is True
    store.save_batch(_batch("compliment", "夸夸"))

    latest = store.latest_batch("photography")
    assert latest.batch_id == second.batch_id
    assert [(s.title, s.prompt, s.source) for s in latest.items] == [("赛博朋克", "赛博朋克 prompt", ["赛博朋克热搜"])]
    assert store.count_batches("photography") == 2
    assert store.count_batches("compliment") == 1


def test_batch_rows_keep_insertion_order(store):
    store.save_batch(_batch("photography", "c", "a", "b"))
    assert [s.title for s in store.latest_batch("photography").items] == ["c", "a", "b"]


@pytest.mark.asyncio
async def test_async_wrappers(store):
    batch = _batch("compliment", "国风")
    assert await store.persist(batch) is True

    latest = await store.fetch_latest("compliment")
    assert latest.batch_id == batch.batch_id
    assert latest.catalogue == "compliment"
