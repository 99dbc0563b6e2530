from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional, Tuple

import pytest

from benq_projector.client import (
    BenqProjectorClientConfig,
    ConnectionState,
    InMemoryPropertyRegistry,
    SessionContext,
)
from benq_projector.protocol import CommandTable, get_model


class FakeTimerHandle:
    def __init__(self, when: float, seq: int, callback: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        self._when = when
        self.seq = seq
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def when(self) -> float:
        return self._when

    def run(self) -> None:
        self._callback(*self._args)


class FakeLoop:
    """Just enough of an event loop to drive call_later timers by hand."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[FakeTimerHandle] = []
        self._seq = 0

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeTimerHandle:
        self._seq += 1
        handle = FakeTimerHandle(self.now + delay, self._seq, callback, args)
        self.timers.append(handle)
        return handle

    @property
    def pending(self) -> List[FakeTimerHandle]:
        return [t for t in self.timers if not t.cancelled()]

    def advance(self, secs: float) -> None:
        target = self.now + secs
        while True:
            due = [t for t in self.timers if not t.cancelled() and t.when() <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when(), t.seq))
            self.timers.remove(timer)
            self.now = timer.when()
            timer.run()
        self.now = target


class PropertyRecorder:
    """Registry subscriber that remembers every write."""

    def __init__(self) -> None:
        self.writes: List[Tuple[str, Any, bool]] = []

    def __call__(self, name: str, value: Any, ack: bool) -> None:
        self.writes.append((name, value, ack))

    def values_for(self, name: str) -> List[Any]:
        return [value for n, value, _ in self.writes if n == name]


class WriteRecorder:
    def __init__(self, result: bool = True) -> None:
        self.data: List[bytes] = []
        self.result = result

    def __call__(self, data: bytes) -> bool:
        self.data.append(data)
        return self.result


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BENQ_PROJECTOR_HOST", "BENQ_PROJECTOR_PORT", "BENQ_PROJECTOR_MODEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def context(loop: FakeLoop) -> SessionContext:
    return SessionContext(loop)  # type: ignore[arg-type]


@pytest.fixture
def connected_context(context: SessionContext) -> SessionContext:
    context.connection_state = ConnectionState.CONNECTED
    context.gate.open_all()
    return context


@pytest.fixture
def commands() -> CommandTable:
    return get_model("W1070").commands


@pytest.fixture
def config() -> BenqProjectorClientConfig:
    return BenqProjectorClientConfig(model="W1070")


@pytest.fixture
def registry() -> InMemoryPropertyRegistry:
    return InMemoryPropertyRegistry()


@pytest.fixture
def recorder(registry: InMemoryPropertyRegistry) -> PropertyRecorder:
    result = PropertyRecorder()
    registry.subscribe(result)
    return result


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0, what: Optional[str] = None) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError(f"Timed out waiting for {what or predicate}")
        await asyncio.sleep(0.01)
