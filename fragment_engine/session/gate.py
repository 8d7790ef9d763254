"""
LifecycleGate - handshake 전 envelope 보관 및 재생

CONNECTING: 도착한 envelope을 제한된 FIFO에 보관
READY:      sink로 바로 전달 (전환 시 보관분을 원래 순서대로 한 번만 재생)
CLOSED:     도착/보관 중인 envelope 모두 경고 로그 후 폐기
"""
import logging
import threading
from collections import deque
from enum import Enum, auto
from typing import Any, Callable

from ..common.constants import GATE_CAPACITY

logger = logging.getLogger(__name__)


class GateState(Enum):
    CONNECTING = auto()
    READY = auto()
    CLOSED = auto()


class LifecycleGate:
    def __init__(self, sink: Callable[[Any], None], capacity: int = GATE_CAPACITY, name: str = "gate"):
        self.sink = sink
        self.capacity = capacity
        self.name = name
        self.state = GateState.CONNECTING
        self._queue: deque = deque()
        # 재생 도중 도착한 envelope이 앞지르지 않도록 offer와 재생을 직렬화
        self._lock = threading.Lock()

    def offer(self, envelope) -> bool:
        """envelope 하나 수신. 전달되었거나 보관되었으면 True"""
        with self._lock:
            if self.state is GateState.READY:
                self.sink(envelope)
                return True

            if self.state is GateState.CLOSED:
                logger.warning("[%s] closed, dropping %s", self.name, _describe(envelope))
                return False

            if len(self._queue) >= self.capacity:
                logger.warning("[%s] queue full (%d), dropping %s",
                               self.name, self.capacity, _describe(envelope))
                return False

            self._queue.append(envelope)
            return True

    def mark_ready(self) -> bool:
        """CONNECTING → READY (한 번만). 전환이 일어났으면 True"""
        with self._lock:
            if self.state is not GateState.CONNECTING:
                return False

            self.state = GateState.READY
            replay = list(self._queue)
            self._queue.clear()
            logger.info("[%s] ready, replaying %d queued envelope(s)", self.name, len(replay))
            for envelope in replay:
                self.sink(envelope)
            return True

    def close(self):
        with self._lock:
            if self.state is GateState.CLOSED:
                return
            self.state = GateState.CLOSED
            for envelope in self._queue:
                logger.warning("[%s] closed before ready, dropping %s", self.name, _describe(envelope))
            self._queue.clear()

    @property
    def queued(self) -> int:
        return len(self._queue)


def _describe(envelope) -> str:
    op = getattr(envelope, "type", None)
    return getattr(op, "value", None) or type(envelope).__name__
