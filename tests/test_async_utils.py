"""Tests for async_utils.py: gather_with_errors."""

import asyncio

import pytest

from news_aggregator.shared.async_utils import gather_with_errors


async def _value(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


async def _fail(message, delay=0.0):
    await asyncio.sleep(delay)
    raise ValueError(message)


class TestGatherWithErrors:
    async def test_empty(self):
        assert await gather_with_errors() == []

    async def test_preserves_order(self):
        results = await gather_with_errors(_value("slow", 0.02), _value("fast"), _value("mid", 0.01))
        assert results == ["slow", "fast", "mid"]

    async def test_return_exceptions(self):
        results = await gather_with_errors(_value(1), _fail("boom"), _value(3, 0.01), return_exceptions=True)
        assert results[0] == 1
        assert isinstance(results[1], ValueError)
        assert str(results[1]) == "boom"
        assert results[2] == 3

    async def test_fail_fast_raises_group(self):
        with pytest.raises(ExceptionGroup) as exc_info:
            await gather_with_errors(_value(1, 0.05), _fail("boom"))
        assert exc_info.group_contains(ValueError, match="boom")

    async def test_fail_fast_cancels_siblings(self):
        finished = []

        async def slow():
            await asyncio.sleep(1)
            finished.append("slow")

        with pytest.raises(ExceptionGroup):
            await gather_with_errors(slow(), _fail("boom"))
        assert finished == []
