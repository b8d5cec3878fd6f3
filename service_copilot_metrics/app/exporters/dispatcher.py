"""
Chunked, sequential delivery of a series to a transport.
"""

from typing import Optional

from shared.errors import DispatchError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..series.points import Series, chunked
from .datadog import MetricsTransport

DEFAULT_CHUNK_SIZE = 100


class BatchingDispatcher:
    """Splits a series into contiguous chunks and submits them in order.

    The first failing chunk stops the dispatch; chunks already accepted stay
    delivered.
    """

    def __init__(
        self,
        transport: MetricsTransport,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        metrics: Optional[MetricsCollector] = None
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be a positive integer")
        self.transport = transport
        self.chunk_size = chunk_size
        self.metrics = metrics
        self.logger = get_logger("copilot_metrics.dispatcher")

    async def dispatch(self, series: Series) -> int:
        """Drain ``series`` into the transport; returns the number of chunks sent."""
        points = series.drain()
        if not points:
            self.logger.info("Nothing to dispatch")
            return 0

        sent = 0
        for index, chunk in enumerate(chunked(points, self.chunk_size)):
            self.logger.info("Sending chunk", chunk=index + 1, series=len(chunk))
            try:
                await self.transport.submit(chunk)
            except DispatchError as exc:
                self._record_chunk("error")
                raise exc.for_chunk(index) from exc
            except Exception as exc:
                self._record_chunk("error")
                raise DispatchError(
                    message=f"Chunk {index} failed: {exc}",
                    chunk_index=index
                ) from exc

            self._record_chunk("ok")
            sent += 1

        self.logger.info("All chunks dispatched", chunks=sent, points=len(points))
        return sent

    def _record_chunk(self, status: str) -> None:
        if self.metrics is not None:
            self.metrics.record_chunk(status)
