"""
WidgetController - 탭 이외의 위젯 변경 (progress, toast, dropdown)

모든 메서드는 세션 스레드에서 호출됩니다.
"""
import logging
import threading
from typing import TYPE_CHECKING, Dict

from ..common.constants import SHOW_CLASS
from ..common.errors import AnchorNotFoundError
from ..dom import Element, find_all, find_by_id

if TYPE_CHECKING:
    from ..channel.envelopes import TablerToast, UpdateProgress
    from ..session.session import Session

logger = logging.getLogger(__name__)

HIDE_CLASS = "hide"
DROPDOWN_MENU_CLASS = "dropdown-menu"
DROPDOWN_TOGGLE_CLASS = "dropdown-toggle"


def clamp_percent(value) -> float:
    return max(0.0, min(100.0, float(value)))


def format_percent(value) -> str:
    # 57.0 -> "57%", 12.5 -> "12.5%"
    return f"{value:g}%"


class WidgetController:
    def __init__(self, session: "Session"):
        self.session = session
        self._toast_timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def _element(self, element_id: str) -> Element:
        document = self.session.document
        element = find_by_id(document, element_id) if document is not None else None
        if element is None:
            raise AnchorNotFoundError(element_id)
        return element

    # === progress ===

    def update_progress(self, envelope: "UpdateProgress"):
        """style의 width만 변경. 다른 속성/선언은 그대로"""
        bar = self._element(envelope.id)
        width = format_percent(clamp_percent(envelope.value))
        bar.set_style("width", width)
        logger.debug("Progress #%s -> %s", envelope.id, width)

    # === toast ===

    def show_toast(self, envelope: "TablerToast"):
        toast = self._element(envelope.id)
        options = envelope.options

        toast.remove_class(HIDE_CLASS)
        toast.add_class(SHOW_CLASS)
        toast.attributes["data-bs-animation"] = "true" if options.animation else "false"
        toast.attributes["data-bs-autohide"] = "true" if options.autohide else "false"
        toast.attributes["data-bs-delay"] = str(options.delay)
        logger.info("Showing toast #%s", envelope.id)

        self._cancel_timer(envelope.id)
        if options.autohide:
            timer = threading.Timer(options.delay / 1000, self._schedule_hide, args=(envelope.id,))
            timer.daemon = True
            with self._lock:
                self._toast_timers[envelope.id] = timer
            timer.start()

    def _schedule_hide(self, toast_id: str):
        # 타이머 스레드 → 세션 스레드
        from ..session.task import Task

        with self._lock:
            self._toast_timers.pop(toast_id, None)
        if self.session.closed:
            return
        self.session.task_runner.schedule_task(Task(self._autohide, toast_id))

    def _autohide(self, toast_id: str):
        document = self.session.document
        if document is None or find_by_id(document, toast_id) is None:
            # 타이머가 도는 동안 toast가 트리에서 빠짐
            logger.debug("Toast #%s is gone, autohide skipped", toast_id)
            return
        self.hide_toast(toast_id)

    def hide_toast(self, toast_id: str):
        """toast 닫기 (사용자 닫기 또는 autohide). 서버에 {id: False} 전송"""
        self._cancel_timer(toast_id)
        if self.session.closed:
            return
        toast = self._element(toast_id)
        if not toast.has_class(SHOW_CLASS):
            return
        toast.remove_class(SHOW_CLASS)
        toast.add_class(HIDE_CLASS)
        logger.info("Toast #%s dismissed", toast_id)
        self.session.send_input(toast_id, False)

    def _cancel_timer(self, toast_id: str):
        with self._lock:
            timer = self._toast_timers.pop(toast_id, None)
        if timer is not None:
            timer.cancel()

    def cancel_timers(self):
        with self._lock:
            timers = list(self._toast_timers.values())
            self._toast_timers.clear()
        for timer in timers:
            timer.cancel()

    # === dropdown ===

    def show_dropdown(self, dropdown_id: str):
        dropdown = self._element(dropdown_id)
        self._set_dropdown(dropdown, True)
        logger.debug("Dropdown #%s shown", dropdown_id)

    def hide_dropdown(self, dropdown_id: str):
        dropdown = self._element(dropdown_id)
        self._set_dropdown(dropdown, False)

    def _set_dropdown(self, dropdown: Element, shown: bool):
        menus = find_all(dropdown, lambda n: n.has_class(DROPDOWN_MENU_CLASS))
        toggles = find_all(dropdown, lambda n: n.has_class(DROPDOWN_TOGGLE_CLASS)
                           or n.attributes.get("data-bs-toggle") == "dropdown")

        for element in [dropdown] + menus:
            if shown:
                element.add_class(SHOW_CLASS)
            else:
                element.remove_class(SHOW_CLASS)
        for toggle in toggles:
            toggle.attributes["aria-expanded"] = "true" if shown else "false"
