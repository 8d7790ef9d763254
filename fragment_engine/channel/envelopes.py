"""
Envelope - 채널로 전달되는 UI 변경 메시지

와이어 형식 {"type": <op>, "message": <payload>}를 채널 경계에서
타입이 있는 envelope 객체로 검증/변환합니다.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..common.errors import EnvelopeError
from ..tags import Fragment, FragmentKind


class EnvelopeType(Enum):
    """채널 메시지 타입"""
    INSERT_TAB = "insert-tab"
    REMOVE_TAB = "remove-tab"
    SELECT_TAB = "select-tab"
    UPDATE_PROGRESS = "update-progress"
    TABLER_TOAST = "tabler-toast"
    SHOW_DROPDOWN = "show-dropdown"


class Position(Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class InsertTab:
    input_id: str
    content: Fragment
    link: Fragment
    target: str
    position: Position = Position.AFTER
    select: bool = False

    type = EnvelopeType.INSERT_TAB

    def to_wire(self) -> dict:
        return {
            "inputId": self.input_id,
            "content": self.content.to_wire(),
            "link": self.link.to_wire(),
            "target": self.target,
            "position": self.position.value,
            "select": self.select,
        }


@dataclass(frozen=True)
class RemoveTab:
    input_id: str
    target: str

    type = EnvelopeType.REMOVE_TAB

    def to_wire(self) -> dict:
        return {"inputId": self.input_id, "target": self.target}


@dataclass(frozen=True)
class SelectTab:
    input_id: str
    selected: str

    type = EnvelopeType.SELECT_TAB

    def to_wire(self) -> dict:
        return {"inputId": self.input_id, "selected": self.selected}


@dataclass(frozen=True)
class UpdateProgress:
    id: str
    value: float

    type = EnvelopeType.UPDATE_PROGRESS

    def to_wire(self) -> dict:
        return {"id": self.id, "value": self.value}


@dataclass(frozen=True)
class ToastOptions:
    animation: bool = True
    autohide: bool = True
    delay: int = 5000  # ms


@dataclass(frozen=True)
class TablerToast:
    id: str
    options: ToastOptions = field(default_factory=ToastOptions)

    type = EnvelopeType.TABLER_TOAST

    def to_wire(self) -> dict:
        return {
            "id": self.id,
            "options": {
                "animation": self.options.animation,
                "autohide": self.options.autohide,
                "delay": self.options.delay,
            },
        }


@dataclass(frozen=True)
class ShowDropdown:
    id: str

    type = EnvelopeType.SHOW_DROPDOWN

    def to_wire(self) -> str:
        return self.id


Envelope = Union[InsertTab, RemoveTab, SelectTab, UpdateProgress, TablerToast, ShowDropdown]


def _require_str(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise EnvelopeError(f"Field {key!r} must be a non-empty string, got {value!r}")
    return value


def _require_dict(payload: Any, op: str) -> dict:
    if not isinstance(payload, dict):
        raise EnvelopeError(f"{op} payload must be an object, got {type(payload).__name__}")
    return payload


def _bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise EnvelopeError(f"Field {key!r} must be a boolean, got {value!r}")
    return value


def decode_envelope(op: EnvelopeType, payload: Any) -> Envelope:
    """와이어 payload를 op에 해당하는 envelope으로 변환"""
    if op is EnvelopeType.INSERT_TAB:
        payload = _require_dict(payload, op.value)
        try:
            position = Position(payload.get("position", "after"))
        except ValueError:
            raise EnvelopeError(f"Unknown position: {payload.get('position')!r}") from None
        return InsertTab(
            input_id=_require_str(payload, "inputId"),
            content=Fragment.from_wire(payload.get("content"), FragmentKind.CONTENT),
            link=Fragment.from_wire(payload.get("link"), FragmentKind.LINK),
            target=_require_str(payload, "target"),
            position=position,
            select=_bool(payload.get("select", False), "select"),
        )

    elif op is EnvelopeType.REMOVE_TAB:
        payload = _require_dict(payload, op.value)
        return RemoveTab(_require_str(payload, "inputId"), _require_str(payload, "target"))

    elif op is EnvelopeType.SELECT_TAB:
        payload = _require_dict(payload, op.value)
        return SelectTab(_require_str(payload, "inputId"), _require_str(payload, "selected"))

    elif op is EnvelopeType.UPDATE_PROGRESS:
        payload = _require_dict(payload, op.value)
        value = payload.get("value")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EnvelopeError(f"Progress value must be a number, got {value!r}")
        return UpdateProgress(_require_str(payload, "id"), value)

    elif op is EnvelopeType.TABLER_TOAST:
        payload = _require_dict(payload, op.value)
        options = payload.get("options") or {}
        if not isinstance(options, dict):
            raise EnvelopeError("Toast options must be an object")
        delay = options.get("delay", ToastOptions.delay)
        if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
            raise EnvelopeError(f"Toast delay must be a non-negative number, got {delay!r}")
        return TablerToast(
            _require_str(payload, "id"),
            ToastOptions(
                animation=_bool(options.get("animation", True), "animation"),
                autohide=_bool(options.get("autohide", True), "autohide"),
                delay=int(delay),
            ),
        )

    elif op is EnvelopeType.SHOW_DROPDOWN:
        if not isinstance(payload, str) or not payload:
            raise EnvelopeError(f"show-dropdown payload must be an id string, got {payload!r}")
        return ShowDropdown(payload)

    raise EnvelopeError(f"No decoder for {op}")


def encode_envelope(envelope: Envelope, seq: Optional[int] = None) -> dict:
    message = {"type": envelope.type.value, "message": envelope.to_wire()}
    if seq is not None:
        message["seq"] = seq
    return message
