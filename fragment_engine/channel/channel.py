"""
MessageChannel - 세션 하나의 양방향 메시지 채널 (in-process 어댑터)

- inbound: 서버 → 클라이언트 envelope (JSON 문자열 또는 dict)
- outbound: 클라이언트 → 서버 메시지 (선택된 탭, 토스트 닫힘 등)

전송 계층 자체는 구현하지 않고, 메시지 형식 검증과 소비 규칙만 담당합니다.
"""
import json
import logging
import threading
from queue import Queue, Empty
from typing import Any, Callable, List, Optional

from ..common.errors import ChannelClosedError, EnvelopeError
from .envelopes import Envelope, EnvelopeType, decode_envelope

logger = logging.getLogger(__name__)


class MessageChannel:
    def __init__(self, name: str = "channel"):
        self.name = name
        self.outbound: Queue[dict] = Queue()
        self.on_envelope: Optional[Callable[[Envelope], None]] = None
        self.on_open: Optional[Callable[[], None]] = None

        self.is_open = False
        self.closed = False
        self._last_seq = 0
        self._lock = threading.Lock()

    def attach(self, on_envelope: Callable[[Envelope], None], on_open: Callable[[], None]):
        """세션이 inbound 소비자와 handshake 콜백을 등록"""
        self.on_envelope = on_envelope
        self.on_open = on_open

    def open(self):
        """handshake 완료"""
        if self.closed or self.is_open:
            return
        self.is_open = True
        logger.info("[%s] handshake complete", self.name)
        if self.on_open:
            self.on_open()

    def receive(self, raw: Any) -> Optional[Envelope]:
        """
        서버 메시지 하나를 검증하여 세션으로 전달

        Returns:
            전달된 envelope (무시된 경우 None)
        """
        if self.closed:
            logger.warning("[%s] closed, dropping inbound message", self.name)
            return None

        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                logger.warning("[%s] malformed message: %s", self.name, e)
                return None

        if not isinstance(raw, dict) or "type" not in raw:
            logger.warning("[%s] message without type: %r", self.name, raw)
            return None

        seq = raw.get("seq")
        if isinstance(seq, int):
            with self._lock:
                if seq <= self._last_seq:
                    logger.debug("[%s] duplicate delivery of seq %d dropped", self.name, seq)
                    return None
                self._last_seq = seq

        try:
            op = EnvelopeType(raw["type"])
        except ValueError:
            logger.warning("[%s] ignoring unknown message type %r", self.name, raw["type"])
            return None

        try:
            envelope = decode_envelope(op, raw.get("message"))
        except EnvelopeError as e:
            logger.warning("[%s] invalid %s message: %s", self.name, op.value, e)
            return None

        if self.on_envelope:
            self.on_envelope(envelope)
        return envelope

    def send(self, message: dict):
        """클라이언트 → 서버"""
        if self.closed:
            raise ChannelClosedError(f"{self.name} is closed")
        self.outbound.put(message)

    def send_input(self, input_id: str, value: Any):
        self.send({"type": "input", "id": input_id, "value": value})

    def poll_outbound(self) -> List[dict]:
        """보낸 메시지들 가져오기 (non-blocking)"""
        messages = []
        while True:
            try:
                messages.append(self.outbound.get_nowait())
            except Empty:
                break
        return messages

    def close(self):
        self.closed = True
        self.is_open = False
