"""
Session - 라이브 UI 트리 하나에 대한 런타임 컨텍스트

Session은 다음을 소유하며, 모든 Serializer/Injector/Loader 호출에
명시적으로 전달됩니다:
- 라이브 DOM 트리 (document)
- 에셋 레지스트리/로더, JSContext, 스타일시트 목록
- 메시지 채널과 LifecycleGate
- FragmentInjector, WidgetController, Multiplexer
- 소비자 스레드 (SessionThread)
"""
import itertools
import logging
import threading
from typing import Any, List, Optional

from ..assets import AssetLoader, AssetMaterializer, DependencyRegistry, Stylesheet
from ..channel import Envelope, MessageChannel, Multiplexer
from ..common.config import RuntimeConfig
from ..common.constants import SESSION_JOIN_TIMEOUT
from ..common.errors import ChannelClosedError, FragmentEngineError
from ..content import FragmentInjector, WidgetController
from ..dom import HTMLParser
from ..networking import NetworkThread
from ..scripting import JSContext
from ..tags import FragmentSerializer
from .gate import LifecycleGate
from .session_thread import Event, EventType, SessionThread
from .task import TaskRunner

logger = logging.getLogger(__name__)

_session_ids = itertools.count(1)


class Session:
    def __init__(
        self,
        document_html: str,
        network: NetworkThread,
        config: Optional[RuntimeConfig] = None,
        session_id: Optional[str] = None,
        base_url: Optional[str] = None,
        channel: Optional[MessageChannel] = None,
    ):
        self.session_id = session_id or f"session-{next(_session_ids)}"
        self.config = config or RuntimeConfig()
        self.closed = False
        self.errors: List[FragmentEngineError] = []

        # 초기 페이지 (서버가 렌더링한 마크업)
        self.document = HTMLParser(document_html).parse()
        self.stylesheets: List[Stylesheet] = []

        # 에셋
        self.registry = DependencyRegistry()
        self.js_context = JSContext(self)
        self.loader = AssetLoader(
            self.registry, network, AssetMaterializer(self),
            config=self.config, base_url=base_url,
        )
        self.serializer = FragmentSerializer()

        # 트리 변경
        self.injector = FragmentInjector(self)
        self.widgets = WidgetController(self)
        self.multiplexer = Multiplexer(self)
        self.injector.on_activate(self._send_selection)

        # 소비자
        self.task_runner = TaskRunner(self)
        self.thread = SessionThread(self)

        # 채널 → 게이트 → 소비자
        self.gate = LifecycleGate(self._enqueue_envelope, self.config.gate_capacity,
                                  name=self.session_id)
        self.channel = channel or MessageChannel(name=self.session_id)
        self.channel.attach(self.gate.offer, self._on_channel_open)

    def start(self):
        """소비자 스레드 시작"""
        if not self.thread.is_alive():
            self.thread.start()

    def _enqueue_envelope(self, envelope: Envelope):
        self.thread.post_event(Event(EventType.ENVELOPE, envelope=envelope))

    def _on_channel_open(self):
        self.gate.mark_ready()

    def known_dependencies(self):
        """클라이언트가 이미 로드한 에셋 키"""
        return self.registry.known()

    # === 출력 메시지 (클라이언트 → 서버) ===

    def send_input(self, input_id: str, value: Any):
        try:
            self.channel.send_input(input_id, value)
        except ChannelClosedError as e:
            logger.warning("[%s] dropping input %s=%r: %s", self.session_id, input_id, value, e)

    def _send_selection(self, group_id, pane_id):
        if group_id:
            self.send_input(group_id, pane_id)

    # === UI 상호작용 이벤트 ===

    def select_tab(self, pane_id: str):
        self.thread.post_event(Event(EventType.SELECT_TAB, pane_id=pane_id))

    def dismiss_toast(self, toast_id: str):
        self.thread.post_event(Event(EventType.DISMISS_TOAST, toast_id=toast_id))

    def close_dropdown(self, dropdown_id: str):
        self.thread.post_event(Event(EventType.CLOSE_DROPDOWN, dropdown_id=dropdown_id))

    # === 실행 제어 ===

    def run_until_idle(self):
        """스레드를 시작하지 않은 세션에서 대기 중인 작업을 동기 처리"""
        if self.thread.is_alive():
            raise RuntimeError(f"{self.session_id} is running on its own thread")
        self.thread.drain()

    def wait_idle(self, timeout=None) -> bool:
        return self.thread.wait_idle(timeout)

    def close(self):
        """
        세션 종료

        진행 중인 에셋 로드는 끝까지 진행되지만 그 결과 삽입은 무시됩니다.
        """
        if self.closed:
            return
        self.closed = True
        self.gate.close()
        self.channel.close()
        self.thread.stop()
        self._join_thread()
        self.widgets.cancel_timers()
        dropped = self.task_runner.clear()
        if dropped:
            logger.debug("[%s] dropped %d pending task(s)", self.session_id, dropped)
        self.js_context.discard()
        self.loader.shutdown()
        self.document = None
        logger.info("[%s] closed", self.session_id)

    def _join_thread(self):
        # 처리 중인 이벤트가 끝난 뒤에 트리와 JSContext를 정리
        if not self.thread.is_alive() or threading.current_thread() is self.thread:
            return
        self.thread.join(SESSION_JOIN_TIMEOUT)
        if self.thread.is_alive():
            logger.warning("[%s] consumer still busy after %.1fs", self.session_id,
                           SESSION_JOIN_TIMEOUT)

    def __repr__(self):
        return f"Session({self.session_id!r}, closed={self.closed})"
