"""Pipeline lifecycle: config validation, bounded fan-out and degradation on failure."""

import threading
import time
from typing import Any

import pytest

from conftest import NOW, FakeExtractor
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext


class EchoPipeline(BasePipeline[list]):
    config = PipelineConfig(name="echo", display_name="Echo", description="Echoes", max_in_flight=2)

    def empty_result(self, **kwargs: Any) -> list:
        return ["empty"]

    async def execute(self, ctx: PipelineContext, fail: bool = False, **kwargs: Any) -> list:
        if fail:
            raise RuntimeError("boom")
        return await self.fan_out(lambda x: x * 2, [(i,) for i in range(5)])


def test_config_validation():
    with pytest.raises(ValueError):
        PipelineConfig(name="", display_name="x", description="x")
    with pytest.raises(ValueError):
        PipelineConfig(name="x", display_name="x", description="x", days_ahead=0)
    with pytest.raises(ValueError):
        PipelineConfig(name="x", display_name="x", description="x", max_in_flight=0)


async def test_fan_out_keeps_input_order():
    assert await EchoPipeline(FakeExtractor()).run(now=NOW) == [0, 2, 4, 6, 8]


async def test_failure_degrades_to_empty_result():
    assert await EchoPipeline(FakeExtractor()).run(now=NOW, fail=True) == ["empty"]


async def test_fan_out_respects_in_flight_cap():
    lock = threading.Lock()
    active = 0
    peak = 0

    def slow(_):
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.02)
        with lock:
            active -= 1

    await EchoPipeline(FakeExtractor()).fan_out(slow, [(i,) for i in range(8)])

    assert 1 <= peak <= 2
