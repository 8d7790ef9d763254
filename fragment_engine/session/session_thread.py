"""
SessionThread - 세션당 하나씩 생성되는 소비자 스레드

envelope과 UI 이벤트를 도착 순서대로 하나씩 처리합니다.
이벤트 N의 결과(성공/실패)가 확정된 뒤에야 N+1을 시작합니다.
"""
import logging
import threading
from enum import Enum, auto
from queue import Queue, Empty
from typing import TYPE_CHECKING

from ..common.errors import (
    AnchorNotFoundError,
    ChannelClosedError,
    FragmentEngineError,
)
from ..profiling import MeasureTime, set_thread_name

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)


class EventType(Enum):
    """세션 스레드로 전달되는 이벤트 타입"""
    ENVELOPE = auto()
    SELECT_TAB = auto()
    DISMISS_TOAST = auto()
    CLOSE_DROPDOWN = auto()
    STOP = auto()


class Event:
    def __init__(self, event_type: EventType, **kwargs):
        self.type = event_type
        self.data = kwargs

    def __repr__(self):
        return f"Event({self.type.name})"


class SessionThread(threading.Thread):
    def __init__(self, session: "Session"):
        super().__init__(name=f"SessionThread-{session.session_id}", daemon=True)
        self.session = session

        # Channel/UI -> Session 이벤트 큐
        self.event_queue: Queue[Event] = Queue()
        self.running = False

    def run(self):
        """세션 스레드 이벤트 루프"""
        self.running = True
        set_thread_name(self.name)

        while self.running:
            try:
                event = self.event_queue.get(timeout=0.01)
                self.process_event(event)
            except Empty:
                pass

            self.run_task()

    def drain(self):
        """스레드 없이 대기 중인 이벤트/태스크를 모두 처리 (동기 모드)"""
        while True:
            try:
                event = self.event_queue.get_nowait()
            except Empty:
                if not self.run_task():
                    return
                continue
            self.process_event(event)

    def process_event(self, event: Event):
        try:
            if event.type is EventType.STOP:
                self.running = False
                return
            if self.session.closed:
                logger.warning("[%s] session closed, dropping %r", self.session.session_id, event)
                return
            with MeasureTime(f"handle_{event.type.name}", "event"):
                self._guarded(event.type.name, self._handle_event, event)
        finally:
            self.event_queue.task_done()

    def run_task(self) -> bool:
        """예약 작업 하나 실행. 실행했으면 True"""
        task = self.session.task_runner.next_task()
        if task is None:
            return False
        self._guarded(repr(task), task.run)
        return True

    def _guarded(self, label: str, handler, *args):
        # 작업 단위 실패는 기록만 하고 세션 스레드는 계속 돈다
        try:
            handler(*args)
        except (AnchorNotFoundError, ChannelClosedError) as e:
            logger.warning("[%s] %s aborted: %s", self.session.session_id, label, e)
            self.session.errors.append(e)
        except FragmentEngineError as e:
            logger.error("[%s] %s failed: %s", self.session.session_id, label, e)
            self.session.errors.append(e)
        except Exception:
            logger.exception("[%s] unhandled error in %s", self.session.session_id, label)

    def _handle_event(self, event: Event):
        if event.type is EventType.ENVELOPE:
            self.session.multiplexer.dispatch(event.data["envelope"])

        elif event.type is EventType.SELECT_TAB:
            self.session.injector.select(event.data["pane_id"])

        elif event.type is EventType.DISMISS_TOAST:
            self.session.widgets.hide_toast(event.data["toast_id"])

        elif event.type is EventType.CLOSE_DROPDOWN:
            self.session.widgets.hide_dropdown(event.data["dropdown_id"])

    def post_event(self, event: Event):
        self.event_queue.put(event)

    def wait_idle(self, timeout=None) -> bool:
        """큐에 들어온 이벤트가 모두 처리될 때까지 대기"""
        with self.event_queue.all_tasks_done:
            return self.event_queue.all_tasks_done.wait_for(
                lambda: self.event_queue.unfinished_tasks == 0, timeout)

    def stop(self):
        """스레드 종료"""
        self.post_event(Event(EventType.STOP))
