"""
세션 스레드에서 실행할 지연 작업

다른 스레드(토스트 타이머 등)는 라이브 트리를 직접 건드리지 않고
Task를 예약하며, 세션 스레드가 이벤트 사이사이에 하나씩 실행합니다.
"""
import threading
from collections import deque
from typing import Optional

from ..profiling import MeasureTime


class Task:
    def __init__(self, task_code, *args):
        self.task_code = task_code
        self.args = args
        self.name = getattr(task_code, "__name__", "task")

    def run(self):
        try:
            with MeasureTime(f"task_{self.name}", "task"):
                self.task_code(*self.args)
        finally:
            self.task_code = None
            self.args = None

    def __repr__(self):
        return f"Task({self.name})"


class TaskRunner:
    def __init__(self, session):
        self.session = session
        self._tasks = deque()
        self._lock = threading.Lock()

    def schedule_task(self, task: Task):
        with self._lock:
            self._tasks.append(task)

    def has_tasks(self) -> bool:
        with self._lock:
            return bool(self._tasks)

    def next_task(self) -> Optional[Task]:
        """다음 예약 작업 꺼내기. 실행과 예외 처리는 세션 스레드 몫"""
        with self._lock:
            return self._tasks.popleft() if self._tasks else None

    def clear(self) -> int:
        """세션 종료 시 남은 작업 폐기"""
        with self._lock:
            dropped = len(self._tasks)
            self._tasks.clear()
        return dropped
