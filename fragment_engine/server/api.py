"""
ServerSession - 서버 측 API

서버 코드가 Tag 트리를 넘기면 직렬화하여 envelope 하나로 채널에 보냅니다.
메시지마다 증가하는 seq를 붙여 중복 전달을 채널에서 걸러낼 수 있게 합니다.
"""
import itertools
import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from ..channel.envelopes import (
    Envelope,
    InsertTab,
    Position,
    RemoveTab,
    SelectTab,
    ShowDropdown,
    TablerToast,
    ToastOptions,
    UpdateProgress,
    encode_envelope,
)
from ..tags import TabPanel

if TYPE_CHECKING:
    from ..session.session import Session

logger = logging.getLogger(__name__)


class ServerSession:
    def __init__(self, session: "Session"):
        self.session = session
        self.inputs: Dict[str, Any] = {}
        self._seq = itertools.count(1)

    def send(self, envelope: Envelope) -> Optional[Envelope]:
        message = encode_envelope(envelope, seq=next(self._seq))
        logger.debug("[%s] sending %s seq=%d",
                     self.session.session_id, message["type"], message["seq"])
        return self.session.channel.receive(json.dumps(message))

    # === 탭 ===

    def insert_tab(self, input_id: str, panel: TabPanel, target: str,
                   position: Union[str, Position] = Position.AFTER, select: bool = False):
        """target 탭 앞/뒤에 panel 삽입"""
        content, link = self.session.serializer.serialize_tab(
            panel, known=self.session.known_dependencies())
        return self.send(InsertTab(
            input_id=input_id,
            content=content,
            link=link,
            target=target,
            position=Position(position),
            select=select,
        ))

    def remove_tab(self, input_id: str, target: str):
        return self.send(RemoveTab(input_id, target))

    def select_tab(self, input_id: str, selected: str):
        return self.send(SelectTab(input_id, selected))

    # === 위젯 ===

    def update_progress(self, progress_id: str, value: float):
        return self.send(UpdateProgress(progress_id, value))

    def show_toast(self, toast_id: str, animation: bool = True,
                   autohide: bool = True, delay: int = 5000):
        return self.send(TablerToast(toast_id, ToastOptions(animation, autohide, delay)))

    def show_dropdown(self, dropdown_id: str):
        return self.send(ShowDropdown(dropdown_id))

    # === 클라이언트 입력 ===

    def collect_inputs(self) -> List[dict]:
        """클라이언트가 보낸 input 메시지를 가져와 inputs에 반영"""
        messages = self.session.channel.poll_outbound()
        for message in messages:
            if message.get("type") == "input":
                self.inputs[message["id"]] = message["value"]
        return messages
