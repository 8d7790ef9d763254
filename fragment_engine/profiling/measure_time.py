"""
Chrome Tracing Format 프로파일러

사용법:
    # 출력 파일을 지정하면 수집 시작 (기본은 비활성)
    Tracer.get().configure("trace.json")

    with MeasureTime("insert_tab", "inject"):
        injector.insert(envelope)

결과 파일은 chrome://tracing 에서 열 수 있습니다.
"""
import atexit
import json
import logging
import threading
import time
from typing import Optional, List, Dict, Any

logger = logging.getLogger(__name__)


class Tracer:
    """싱글톤 트레이서 - 모든 이벤트를 수집"""

    _instance: Optional["Tracer"] = None
    _lock = threading.Lock()

    def __init__(self):
        self.events: List[Dict[str, Any]] = []
        self.lock = threading.Lock()
        self.enabled = False
        self.start_time = time.perf_counter()
        self.output_file: Optional[str] = None
        self.thread_names: Dict[int, str] = {}
        self.process_id = 1

    @classmethod
    def get(cls) -> "Tracer":
        """싱글톤 인스턴스 반환"""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = Tracer()
        return cls._instance

    def configure(self, output_file: Optional[str]):
        """출력 파일 지정 시 수집 시작, 프로세스 종료 시 저장"""
        if not output_file or self.enabled:
            return
        self.output_file = output_file
        self.enabled = True
        atexit.register(self.finish)

    def set_thread_name(self, name: str):
        self.thread_names[threading.get_ident()] = name

    def _event(self, name: str, category: str, phase: str, args: Optional[Dict] = None):
        if not self.enabled:
            return
        event = {
            "name": name,
            "cat": category,
            "ph": phase,  # 'B' = begin, 'E' = end
            "ts": (time.perf_counter() - self.start_time) * 1_000_000,
            "tid": threading.get_ident(),
            "pid": self.process_id,
        }
        if args:
            event["args"] = args
        with self.lock:
            self.events.append(event)

    def begin(self, name: str, category: str = "function", args: Optional[Dict] = None):
        self._event(name, category, "B", args)

    def end(self, name: str, category: str = "function"):
        self._event(name, category, "E")

    def finish(self):
        """트레이스 종료 및 JSON 파일 저장"""
        if not self.enabled:
            return
        self.enabled = False

        metadata = [{
            "name": "thread_name", "ph": "M", "pid": self.process_id,
            "tid": tid, "args": {"name": name},
        } for tid, name in self.thread_names.items()]

        with self.lock:
            trace_data = {"traceEvents": metadata + self.events, "displayTimeUnit": "ms"}
            with open(self.output_file, "w") as f:
                json.dump(trace_data, f)
        logger.info("Trace saved to %s", self.output_file)


class MeasureTime:
    """시간 측정 컨텍스트 매니저"""

    def __init__(self, name: str, category: str = "function", args: Optional[Dict] = None):
        self.name = name
        self.category = category
        self.args = args
        self.tracer = Tracer.get()

    def __enter__(self):
        self.tracer.begin(self.name, self.category, self.args)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.tracer.end(self.name, self.category)
        return False


def set_thread_name(name: str):
    """현재 스레드 이름 설정"""
    Tracer.get().set_thread_name(name)
