"""
JSContext - JavaScript 실행 컨텍스트

각 Session은 자신만의 JSContext를 가지며:
- 로드된 script 에셋을 순서대로 실행
- document.getElementById / getAttribute / setAttribute 를 라이브 트리에 연결
"""
import logging
import threading
from typing import TYPE_CHECKING

import dukpy

from ..dom import find_by_id

if TYPE_CHECKING:
    from ..session.session import Session

logger = logging.getLogger(__name__)

RUNTIME_JS = """
var window = this;
var console = {
    log: function() {
        call_python("log", Array.prototype.join.call(arguments, " "));
    }
};
console.warn = console.log;
console.error = console.log;

function Node(handle) { this.handle = handle; }
Node.prototype.getAttribute = function(attr) {
    return call_python("getAttribute", this.handle, attr);
};
Node.prototype.setAttribute = function(attr, value) {
    call_python("setAttribute", this.handle, attr, String(value));
};

var document = {
    getElementById: function(id) {
        var handle = call_python("getElementById", id);
        return handle < 0 ? null : new Node(handle);
    }
};
"""


class JSContext:
    """세션 단위 dukpy 인터프리터 래퍼"""

    def __init__(self, session: "Session"):
        self.session = session
        self.interp = dukpy.JSInterpreter()
        # 인터프리터는 스레드 안전하지 않음 (에셋 체인 스레드에서도 호출됨)
        self.lock = threading.RLock()

        self.interp.export_function("log", self.log)
        self.interp.export_function("getElementById", self.get_element_by_id)
        self.interp.export_function("getAttribute", self.get_attribute)
        self.interp.export_function("setAttribute", self.set_attribute)

        self.interp.evaljs(RUNTIME_JS)

        self.discarded = False
        self.node_to_handle = {}
        self.handle_to_node = {}

    def run(self, script, code):
        """스크립트 실행 - 실패해도 예외를 올리지 않음"""
        if self.discarded:
            return None
        with self.lock:
            try:
                return self.interp.evaljs(code)
            except Exception as e:
                logger.warning("Script %s error: %s", script, e)
                return None

    def log(self, message):
        logger.info("[%s] console: %s", self.session.session_id, message)

    def get_handle(self, elt):
        if elt not in self.node_to_handle:
            handle = len(self.node_to_handle)
            self.node_to_handle[elt] = handle
            self.handle_to_node[handle] = elt
            return handle
        return self.node_to_handle[elt]

    def get_element_by_id(self, element_id):
        if self.session.document is None:
            return -1
        elt = find_by_id(self.session.document, element_id)
        if elt is None:
            return -1
        return self.get_handle(elt)

    def get_attribute(self, handle, attr):
        elt = self.handle_to_node[handle]
        attr_val = elt.attributes.get(attr, None)
        return attr_val if attr_val else ""

    def set_attribute(self, handle, attr, value):
        elt = self.handle_to_node[handle]
        elt.attributes[attr] = value

    def discard(self):
        """세션 종료 후에는 더 이상 실행하지 않음"""
        self.discarded = True
        self.node_to_handle.clear()
        self.handle_to_node.clear()
