"""
Tests for progress reporting.
"""

import pytest

from shared.progress import ProgressReporter


@pytest.mark.asyncio
async def test_sync_callback_receives_update():
    updates = []
    reporter = ProgressReporter(updates.append, total_steps=4)

    await reporter.report("Generating videos", 15, detail="studio_intro")

    assert len(updates) == 1
    assert updates[0].current_step == "Generating videos"
    assert updates[0].progress == 15
    assert updates[0].total_steps == 4
    assert updates[0].current_segment == "studio_intro"


@pytest.mark.asyncio
async def test_async_callback_awaited():
    updates = []

    async def callback(update):
        updates.append(update.progress)

    await ProgressReporter(callback).report("Complete", 100)

    assert updates == [100]


@pytest.mark.asyncio
async def test_percent_clamped():
    updates = []

    await ProgressReporter(updates.append).report("Complete", 140)

    assert updates[0].progress == 100


@pytest.mark.asyncio
async def test_missing_callback_is_noop():
    await ProgressReporter().report("Generating videos", 15)


@pytest.mark.asyncio
async def test_failing_callback_is_swallowed():
    def callback(update):
        raise RuntimeError("socket closed")

    await ProgressReporter(callback).report("Generating videos", 15)
