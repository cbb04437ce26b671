from contextlib import contextmanager
from datetime import timedelta
import time
from typing import Any, Awaitable, Callable, Generator

import statsd
from statsd.client.timer import Timer
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.config import ConfigStats


class Stats:
    def timing(self, key: str, value: int) -> None:
        raise NotImplementedError

    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        raise NotImplementedError

    def gauge(self, key: str, value: int, delta: bool = False) -> None:
        raise NotImplementedError

    def timer(self, key: str) -> Timer:
        raise NotImplementedError


class NoopStats(Stats):
    def timing(self, key: str, value: int) -> None:
        pass

    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        pass

    def gauge(self, key: str, value: int, delta: bool = False) -> None:
        pass

    def timer(self, key: str) -> Timer:
        @contextmanager
        def noop_timer() -> Generator[Any, Any, Any]:
            yield

        return noop_timer()  # type: ignore[return-value]


class MemoryClient:
    """
    Keeps stats in a dict instead of sending them to a statsd daemon. Used when no host is configured.
    """

    def __init__(self) -> None:
        self.memory: dict[str, Any] = {}

    def timer(self, stat: str, rate: int = 1) -> Timer:
        return Timer(self, stat, rate)

    def timing(self, stat: str, delta: timedelta | float, rate: int = 1) -> None:
        if isinstance(delta, timedelta):
            delta = delta.total_seconds() * 1000.0
        self.memory.setdefault(stat, []).append(delta)

    def incr(self, stat: str, count: int = 1, rate: int = 1) -> None:
        self.memory[stat] = self.memory.get(stat, 0) + count

    def gauge(self, stat: str, value: int, rate: int = 1, delta: bool = False) -> None:
        self.memory.setdefault(stat, []).append({"value": value, "timestamp": time.time()})

    def get_memory(self) -> dict[str, Any]:
        return self.memory


class Statsd(Stats):
    def __init__(self, client: statsd.StatsClient | MemoryClient, prefix: str | None = None) -> None:
        self.client = client
        self.prefix = prefix

    def key(self, key: str) -> str:
        return f"{self.prefix}.{key}" if self.prefix else key

    def timing(self, key: str, value: int) -> None:
        self.client.timing(self.key(key), value)

    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        self.client.incr(self.key(key), count, rate)

    def gauge(self, key: str, value: int, delta: bool = False) -> None:
        self.client.gauge(self.key(key), value, delta=delta)

    def timer(self, key: str) -> Timer:
        return self.client.timer(self.key(key))


_STATS: Stats = NoopStats()


def setup_stats(config: ConfigStats) -> None:
    global _STATS

    if config.enabled is False:
        _STATS = NoopStats()
        return

    client: statsd.StatsClient | MemoryClient
    if config.host is None or config.host == "":
        client = MemoryClient()
    else:
        client = statsd.StatsClient(config.host, config.port or 8125)
    _STATS = Statsd(client, prefix=config.module_name)


def get_stats() -> Stats:
    return _STATS


class StatsdMiddleware(BaseHTTPMiddleware):
    """
    Counts every request per method and path, and records the response time
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        get_stats().inc(f"http.request.{request.method.lower()}.{request.url.path}")

        start_time = time.monotonic()
        response = await call_next(request)
        get_stats().timing("http.response_time", int((time.monotonic() - start_time) * 1000))

        return response
