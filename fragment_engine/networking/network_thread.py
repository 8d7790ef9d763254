"""
NetworkThread - 비동기 네트워크 요청 처리

에셋 요청을 별도 스레드 풀에서 처리하여 세션 스레드 블로킹 방지.
모든 세션이 하나의 NetworkThread를 공유합니다.
"""
import logging
import threading
from queue import Queue, Empty
from typing import Optional, Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from concurrent.futures import ThreadPoolExecutor

from ..common.constants import FETCH_TIMEOUT, NETWORK_WORKERS
from ..profiling import MeasureTime, set_thread_name

logger = logging.getLogger(__name__)


class RequestType(Enum):
    """네트워크 요청 타입"""
    SCRIPT = auto()         # JavaScript
    STYLESHEET = auto()     # CSS 스타일시트


@dataclass
class NetworkRequest:
    """네트워크 요청 데이터"""
    request_id: int
    url: str
    request_type: RequestType
    callback: Optional[Callable] = None


@dataclass
class NetworkResponse:
    """네트워크 응답 데이터"""
    request_id: int
    request_type: RequestType
    status: int
    headers: dict = field(default_factory=dict)
    body: str = ""
    url: str = ""
    error: Optional[str] = None


class NetworkThread:
    """
    비동기 네트워크 요청 처리 스레드

    - ThreadPoolExecutor로 여러 요청 동시 처리
    - 요청 완료 시 콜백으로 요청한 쪽에 알림
    - fetch 함수는 교체 가능 (url, timeout) -> (status, headers, body)
    """

    def __init__(self, max_workers: int = NETWORK_WORKERS,
                 fetch: Optional[Callable] = None, timeout: float = FETCH_TIMEOUT):
        if fetch is None:
            from .protocols import fetch_url
            fetch = fetch_url
        self.fetch = fetch
        self.timeout = timeout
        self.max_workers = max_workers
        self.executor: Optional[ThreadPoolExecutor] = None
        self.request_queue: Queue[NetworkRequest] = Queue()

        self._request_id_counter = 0
        self._lock = threading.Lock()

        # 진행 중인 요청 추적
        self.pending_requests: dict[int, NetworkRequest] = {}

        self.running = False
        self._dispatcher_thread: Optional[threading.Thread] = None

    def start(self):
        """네트워크 스레드 시작"""
        if self.running:
            return
        self.running = True
        self.executor = ThreadPoolExecutor(max_workers=self.max_workers,
                                           thread_name_prefix="NetworkWorker")
        self._dispatcher_thread = threading.Thread(
            target=self._dispatch_loop, name="NetworkDispatcher", daemon=True)
        self._dispatcher_thread.start()

    def stop(self):
        """네트워크 스레드 종료"""
        self.running = False
        if self._dispatcher_thread:
            self._dispatcher_thread.join(timeout=1.0)
            self._dispatcher_thread = None
        if self.executor:
            self.executor.shutdown(wait=False)
            self.executor = None

    def _get_next_request_id(self) -> int:
        """고유 요청 ID 생성"""
        with self._lock:
            self._request_id_counter += 1
            return self._request_id_counter

    def _dispatch_loop(self):
        """요청 디스패치 루프"""
        set_thread_name("NetworkDispatcher")

        while self.running:
            try:
                request = self.request_queue.get(timeout=0.01)
                self._submit_request(request)
            except Empty:
                pass

    def _submit_request(self, request: NetworkRequest):
        """요청을 ThreadPool에 제출"""
        with self._lock:
            self.pending_requests[request.request_id] = request
        self.executor.submit(self._do_request, request)

    def _do_request(self, request: NetworkRequest):
        """실제 네트워크 요청 수행 (워커 스레드에서)"""
        with MeasureTime(f"network_{request.request_type.name}", "network"):
            try:
                status, headers, body = self.fetch(request.url, self.timeout)
                error = None
                if status >= 400:
                    error = f"HTTP {status}"
                response = NetworkResponse(
                    request_id=request.request_id,
                    request_type=request.request_type,
                    status=status,
                    headers=headers,
                    body=body,
                    url=request.url,
                    error=error,
                )
            except Exception as e:
                response = NetworkResponse(
                    request_id=request.request_id,
                    request_type=request.request_type,
                    status=0,
                    url=request.url,
                    error=str(e) or type(e).__name__,
                )

            if response.error:
                logger.debug("Request %d for %s failed: %s",
                             request.request_id, request.url, response.error)

            with self._lock:
                self.pending_requests.pop(request.request_id, None)

            if request.callback:
                request.callback(response)

    def request(
        self,
        url: str,
        request_type: RequestType = RequestType.SCRIPT,
        callback: Optional[Callable[[NetworkResponse], None]] = None,
    ) -> int:
        """
        비동기 네트워크 요청

        Returns:
            request_id: 요청 추적용 ID
        """
        if not self.running:
            self.start()

        request_id = self._get_next_request_id()
        self.request_queue.put(NetworkRequest(
            request_id=request_id,
            url=url,
            request_type=request_type,
            callback=callback,
        ))
        return request_id

    def request_sync(
        self,
        url: str,
        request_type: RequestType = RequestType.SCRIPT,
        timeout: Optional[float] = None,
    ) -> NetworkResponse:
        """
        동기 네트워크 요청 (블로킹)

        에셋 체인처럼 순서가 중요한 로드에서 사용
        """
        event = threading.Event()
        result: list[NetworkResponse] = []

        def on_complete(response: NetworkResponse):
            result.append(response)
            event.set()

        request_id = self.request(url=url, request_type=request_type, callback=on_complete)

        if not event.wait(timeout):
            return NetworkResponse(
                request_id=request_id,
                request_type=request_type,
                status=0,
                url=url,
                error=f"timed out after {timeout}s",
            )
        return result[0]
