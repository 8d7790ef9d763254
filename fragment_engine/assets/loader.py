"""
AssetLoader - 멱등 에셋 로더

- 같은 에셋에 대한 동시/반복 load()는 한 번의 네트워크 요청으로 합쳐짐
- 한 fragment의 에셋은 목록 순서대로 하나씩 로드 (체인)
- 서로 다른 fragment의 체인은 병렬로 진행 가능
- 실패한 요청은 지수 백오프로 max_retries번까지 재시도
"""
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Callable, Iterable, List, Optional, Sequence

from ..common.config import RuntimeConfig
from ..common.errors import AssetLoadError
from ..networking import NetworkThread, RequestType, URLFactory
from ..profiling import MeasureTime
from .asset_ref import AssetKind, AssetRef
from .registry import DependencyRegistry

logger = logging.getLogger(__name__)

REQUEST_TYPES = {
    AssetKind.SCRIPT: RequestType.SCRIPT,
    AssetKind.STYLE: RequestType.STYLESHEET,
}


class AssetLoader:
    def __init__(
        self,
        registry: DependencyRegistry,
        network: NetworkThread,
        materialize: Callable,
        config: Optional[RuntimeConfig] = None,
        base_url: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.registry = registry
        self.network = network
        self.materialize = materialize
        self.config = config or RuntimeConfig()
        self.base_url = base_url
        self._sleep = sleep
        self._chains = ThreadPoolExecutor(
            max_workers=self.config.chain_workers, thread_name_prefix="AssetChain")

    def has(self, ref: AssetRef) -> bool:
        return self.registry.has(ref)

    def load(self, ref: AssetRef) -> Future:
        """
        에셋 로드 시작 (비블로킹)

        처음 요청한 호출자만 실제로 가져오고, 나머지는 같은 Future를 기다림
        """
        future, owner = self.registry.claim(ref)
        if owner:
            threading.Thread(
                target=self._fetch_and_record, args=(ref,),
                name=f"AssetFetch-{ref}", daemon=True,
            ).start()
        return future

    def load_chain(self, refs: Sequence[AssetRef]) -> Future:
        """refs를 순서대로 로드하는 체인 (이전 에셋이 끝나야 다음 시작)"""
        return self._chains.submit(self._run_chain, tuple(refs))

    def load_fragments(self, *chains: Iterable[AssetRef]):
        """
        여러 fragment의 의존성을 병렬 체인으로 로드하고 모두 끝날 때까지 대기

        하나라도 실패하면 모든 체인이 끝난 뒤 첫 번째 AssetLoadError 하나만 올림
        """
        chains = [tuple(chain) for chain in chains]
        if not any(chains):
            return

        futures = [self.load_chain(chain) for chain in chains if chain]
        errors: List[AssetLoadError] = []
        for future in futures:
            try:
                future.result()
            except AssetLoadError as e:
                errors.append(e)
        if errors:
            raise errors[0]

    def _run_chain(self, refs):
        for ref in refs:
            future = self.load(ref)
            wait = self.load_wait(ref)
            try:
                future.result(timeout=wait)
            except FutureTimeoutError:
                raise AssetLoadError(ref, f"timed out after {wait:g}s") from None

    def load_wait(self, ref: AssetRef) -> float:
        """
        체인이 에셋 하나를 기다리는 시간

        소유 스레드의 재시도가 모두 끝나기 전에는 포기하지 않음
        (load_timeout이 더 길면 그만큼 더 기다림)
        """
        budget = len(ref.urls) * self.config.retry_budget() + self.config.fetch_timeout
        return max(self.config.load_timeout, budget)

    def _fetch_and_record(self, ref: AssetRef):
        with MeasureTime(f"load_{ref.name}", "assets"):
            try:
                bodies = [(url, self._fetch(ref, url)) for url in ref.urls]
                self.materialize(ref, bodies)
            except AssetLoadError as e:
                logger.warning("%s", e)
                self.registry.release(ref, e)
            except Exception as e:
                error = AssetLoadError(ref, str(e))
                logger.warning("%s", error)
                self.registry.release(ref, error)
            else:
                self.registry.mark_loaded(ref)
                logger.info("Loaded %s", ref)

    def _fetch(self, ref: AssetRef, url: str) -> str:
        """URL 하나 가져오기 (재시도 포함)"""
        resolved = URLFactory.resolve_str(self.base_url, url)
        request_type = REQUEST_TYPES[ref.kind]
        attempts = self.config.max_retries + 1

        last_error = None
        for attempt in range(attempts):
            response = self.network.request_sync(
                resolved, request_type, timeout=self.config.fetch_timeout)
            if not response.error:
                return response.body

            last_error = response.error
            if attempt + 1 < attempts:
                delay = self.config.backoff(attempt)
                logger.warning("Fetching %s for %s failed (%s), retry %d/%d in %.2fs",
                               resolved, ref, last_error, attempt + 1,
                               self.config.max_retries, delay)
                self._sleep(delay)

        raise AssetLoadError(ref, f"{resolved}: {last_error} after {attempts} attempt(s)")

    def shutdown(self):
        self._chains.shutdown(wait=False)
