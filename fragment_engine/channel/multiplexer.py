"""Multiplexer - envelope 종류별로 처리기에 전달"""
import logging
from typing import TYPE_CHECKING

from ..profiling import MeasureTime
from .envelopes import (
    Envelope,
    InsertTab,
    RemoveTab,
    SelectTab,
    ShowDropdown,
    TablerToast,
    UpdateProgress,
)

if TYPE_CHECKING:
    from ..session.session import Session

logger = logging.getLogger(__name__)


class Multiplexer:
    """채널의 모든 inbound envelope이 지나가는 단일 진입점"""

    def __init__(self, session: "Session"):
        self.session = session

    def dispatch(self, envelope: Envelope):
        with MeasureTime(f"dispatch_{envelope.type.value}", "envelope"):
            self._dispatch(envelope)

    def _dispatch(self, envelope: Envelope):
        injector = self.session.injector
        widgets = self.session.widgets

        if isinstance(envelope, InsertTab):
            injector.insert(envelope)

        elif isinstance(envelope, RemoveTab):
            injector.remove(envelope.target, envelope.input_id)

        elif isinstance(envelope, SelectTab):
            injector.select(envelope.selected, envelope.input_id)

        elif isinstance(envelope, UpdateProgress):
            widgets.update_progress(envelope)

        elif isinstance(envelope, TablerToast):
            widgets.show_toast(envelope)

        elif isinstance(envelope, ShowDropdown):
            widgets.show_dropdown(envelope.id)

        else:
            logger.warning("No handler for %r", envelope)
