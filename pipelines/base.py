"""
Base Pipeline

Abstract base class for the refresh pipelines.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.extractors.espn import ESPNExtractor


R = TypeVar("R")


class BasePipeline(ABC, Generic[R]):
    """
    Abstract base class for refresh pipelines.

    Provides:
    - Structured logging with run and refresh cycle IDs
    - Template method pattern for the run lifecycle
    - Thread fan-out so blocking HTTP calls never block the event loop
    - Degradation instead of failure: an unexpected exception becomes
      the pipeline's error-flagged empty result

    Subclasses must implement:
    - config: a PipelineConfig
    - execute(): The pipeline logic
    - empty_result(): What to return when execute() blows up
    """

    config: ClassVar[PipelineConfig]

    def __init__(self, extractor: ESPNExtractor):
        self._validate_config()
        self.extractor = extractor

    def _validate_config(self) -> None:
        if getattr(type(self), "config", None) is None:
            raise ValueError(f"{type(self).__name__} needs a PipelineConfig in `config`")

    @abstractmethod
    async def execute(self, ctx: PipelineContext, **kwargs: Any) -> R:
        pass

    @abstractmethod
    def empty_result(self, **kwargs: Any) -> R:
        pass

    async def run(self, now: Optional[datetime] = None, **kwargs: Any) -> R:
        """
        Run execute() inside a fresh PipelineContext.

        Args:
            now: Reference time for the date window (defaults to local now)
            **kwargs: Passed through to execute()
        """
        ctx = PipelineContext(self.config.name, now=now) if now else PipelineContext(self.config.name)
        ctx.start()
        try:
            result = await self.execute(ctx, **kwargs)
        except Exception as e:
            ctx.mark_failed(e)
            return self.empty_result(**kwargs)
        ctx.mark_success()
        return result

    async def fan_out(self, func: Callable[..., Any], args_list: list[tuple]) -> list[Any]:
        """Run func(*args) for each args tuple in worker threads; results keep input order."""
        gate = asyncio.Semaphore(self.config.max_in_flight)

        async def call(args: tuple) -> Any:
            async with gate:
                return await asyncio.to_thread(func, *args)

        return await asyncio.gather(*[call(args) for args in args_list])

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.config.name}>"
