"""Tests for the scheduled refresh jobs."""

import asyncio
import threading

import schedule

from huluhulu_ai.core.config import CatalogueConfig
from huluhulu_ai.jobs.job_mgmt import Job, register_refresh_jobs, submit_refresh


async def _refresh(catalogue):
    return [catalogue]


def test_register_only_catalogues_with_refresh_times():
    job = Job(schedule.Scheduler())
    catalogues = {
        "photography": CatalogueConfig(refresh_times=["08:00", "20:00"]),
        "compliment": CatalogueConfig(),
    }

    loop = asyncio.new_event_loop()
    count = register_refresh_jobs(job, loop, _refresh, catalogues)
    loop.close()

    assert count == 2
    assert len(job.scheduler.get_jobs()) == 2
    job.stop()
    assert job.scheduler.get_jobs() == []


def test_submit_refresh_runs_on_the_event_loop():
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    try:
        future = submit_refresh(loop, _refresh, "photography")
        assert future.result(timeout=5) == ["photography"]
    finally:
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5)
        loop.close()
