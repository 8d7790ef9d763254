import threading
import time
from collections import Counter

import pytest

from fragment_engine.assets import AssetKind, AssetRef
from fragment_engine.common import RuntimeConfig
from fragment_engine.networking import NetworkThread
from fragment_engine.session import Session


DOCUMENT = """
<ul class="nav nav-tabs" id="tabs" role="tablist">
  <li class="nav-item" id="a-tab" role="presentation"><a class="nav-link active" href="#a" data-target="a" aria-selected="true">A</a></li>
  <li class="nav-item" id="b-tab" role="presentation"><a class="nav-link" href="#b" data-target="b" aria-selected="false">B</a></li>
</ul>
<div class="tab-content" id="tabs-content">
  <div class="tab-pane active show" id="a" role="tabpanel">Pane A</div>
  <div class="tab-pane" id="b" role="tabpanel">Pane B</div>
</div>
<div class="progress"><div class="progress-bar" id="p1" style="width: 10%; height: 4px" role="progressbar">progress</div></div>
<div class="toast" id="t1" role="alert"><div class="toast-body">Saved</div></div>
<div class="dropdown" id="dd"><button class="dropdown-toggle" aria-expanded="false">Menu</button><div class="dropdown-menu"><a class="dropdown-item">One</a></div></div>
"""


class FakeFetcher:
    """NetworkThread에 주입하는 가짜 fetch 함수

    - calls: URL별 호출 횟수
    - fail: 항상 실패하는 URL
    - flaky: URL -> 성공하기 전까지 실패할 횟수
    - bodies: URL별 응답 본문
    - hook: 응답 직전에 url을 받아 호출
    """

    def __init__(self, delay=0.0):
        self.delay = delay
        self.calls = Counter()
        self.fail = set()
        self.flaky = {}
        self.bodies = {}
        self.hook = None
        self._lock = threading.Lock()

    def __call__(self, url, timeout=None):
        with self._lock:
            self.calls[url] += 1
            remaining = self.flaky.get(url, 0)
            if remaining:
                self.flaky[url] = remaining - 1
        if self.delay:
            time.sleep(self.delay)
        if self.hook:
            self.hook(url)
        if url in self.fail or remaining:
            return 503, {}, ""
        if url in self.bodies:
            return 200, {}, self.bodies[url]
        if url.endswith(".css"):
            return 200, {}, "body { color: black; }"
        return 200, {}, f"var loaded_{len(url)} = true;"

    @property
    def total(self):
        return sum(self.calls.values())


def script(name, version="1.0", urls=None):
    return AssetRef(name, version, tuple(urls or [f"https://cdn.test/{name}.js"]), AssetKind.SCRIPT)


def style(name, version="1.0"):
    return AssetRef(name, version, (f"https://cdn.test/{name}.css",), AssetKind.STYLE)


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def config():
    return RuntimeConfig(max_retries=2, backoff_base=0.0, backoff_max=0.0,
                         fetch_timeout=2.0, load_timeout=5.0)


@pytest.fixture
def network(fetcher, config):
    thread = NetworkThread(max_workers=4, fetch=fetcher, timeout=config.fetch_timeout)
    thread.start()
    yield thread
    thread.stop()


@pytest.fixture
def session(network, config):
    """스레드 없이 run_until_idle()로 처리하는 세션 (handshake 완료 상태)"""
    s = Session(DOCUMENT, network, config=config)
    s.loader._sleep = lambda delay: None
    s.channel.open()
    yield s
    s.close()


@pytest.fixture
def server(session):
    from fragment_engine.server import ServerSession
    return ServerSession(session)


def child_ids(session, parent_id):
    from fragment_engine.dom import Element, find_by_id
    parent = find_by_id(session.document, parent_id)
    return [child.id for child in parent.children if isinstance(child, Element)]


def active_pane_ids(session):
    from fragment_engine.dom import find_all
    return [pane.id for pane in find_all(session.document,
                                         lambda n: n.has_class("tab-pane") and n.has_class("active"))]
