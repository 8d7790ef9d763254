import time

import pytest

from fragment_engine import Runtime
from fragment_engine.common import AnchorNotFoundError
from fragment_engine.content import FragmentState
from fragment_engine.dom import find_by_id
from fragment_engine.server import ServerSession
from fragment_engine.session import GateState, Session, Task
from fragment_engine.tags import Tag, tab_panel

from conftest import DOCUMENT, FakeFetcher, child_ids, script


@pytest.fixture
def runtime(config):
    fetcher = FakeFetcher(delay=0.02)
    rt = Runtime(config=config, fetch=fetcher)
    rt.fetcher = fetcher
    yield rt
    rt.shutdown()


def test_envelopes_wait_for_handshake(network, config):
    session = Session(DOCUMENT, network, config=config)
    server = ServerSession(session)

    server.insert_tab("tabs", tab_panel("C", "c", value="c"), target="b")
    session.run_until_idle()
    assert "c" not in child_ids(session, "tabs-content")
    assert session.gate.state is GateState.CONNECTING

    session.channel.open()
    session.run_until_idle()

    assert child_ids(session, "tabs-content") == ["a", "b", "c"]
    session.close()


def test_close_before_handshake_drops_envelopes(network, config):
    session = Session(DOCUMENT, network, config=config)
    server = ServerSession(session)
    server.show_dropdown("dd")

    session.close()

    assert session.gate.queued == 0
    assert session.document is None
    # 닫힌 세션으로 보낸 메시지는 조용히 무시
    assert server.show_dropdown("dd") is None


def test_run_until_idle_refuses_threaded_session(runtime):
    session = runtime.new_session(DOCUMENT)

    with pytest.raises(RuntimeError):
        session.run_until_idle()


def test_threaded_session_keeps_arrival_order(runtime):
    session = runtime.new_session(DOCUMENT)
    server = ServerSession(session)
    session.channel.open()

    # d는 c 뒤에 삽입되므로 c의 의존성 로드가 끝날 때까지 기다려야 함
    server.insert_tab("tabs", tab_panel("C", Tag("p", script("slow")), value="c"), target="b")
    server.insert_tab("tabs", tab_panel("D", "d", value="d"), target="c")
    server.select_tab("tabs", "d")

    assert session.wait_idle(timeout=5)
    assert session.errors == []
    assert child_ids(session, "tabs-content") == ["a", "b", "c", "d"]
    assert session.injector.state_of("d") is FragmentState.ACTIVE
    assert runtime.fetcher.calls["https://cdn.test/slow.js"] == 1


def test_sessions_have_independent_registries(runtime):
    first = runtime.new_session(DOCUMENT, start=False)
    second = runtime.new_session(DOCUMENT, start=False)
    for session in (first, second):
        session.channel.open()
        ServerSession(session).insert_tab(
            "tabs", tab_panel("C", Tag("p", script("libA")), value="c"), target="b")
        session.run_until_idle()

    assert runtime.fetcher.calls["https://cdn.test/libA.js"] == 2
    assert first.registry.has(script("libA")) and second.registry.has(script("libA"))


def test_close_during_load_skips_insertion(session, server, fetcher):
    fetcher.hook = lambda url: session.close()

    server.insert_tab("tabs", tab_panel("C", Tag("p", script("libA")), value="c"), target="b")
    session.run_until_idle()

    assert session.closed
    assert session.document is None
    assert session.injector.state_of("c") is FragmentState.FAILED
    assert session.errors == []


def test_runtime_close_session(runtime):
    session = runtime.new_session(DOCUMENT)

    runtime.close_session(session.session_id)
    runtime.close_session(session.session_id)

    assert session.closed
    assert session.session_id not in runtime.sessions


def test_failing_task_keeps_consumer_running(runtime):
    session = runtime.new_session(DOCUMENT)
    server = ServerSession(session)
    session.channel.open()

    def broken():
        raise ValueError("boom")

    session.task_runner.schedule_task(Task(broken))
    deadline = time.monotonic() + 2
    while session.task_runner.has_tasks() and time.monotonic() < deadline:
        time.sleep(0.01)

    server.update_progress("p1", 57)

    assert session.wait_idle(timeout=5)
    assert session.thread.is_alive()
    assert find_by_id(session.document, "p1").get_style("width") == "57%"


def test_autohide_of_removed_toast_keeps_session_working(runtime):
    document = DOCUMENT.replace(
        "Pane B</div>", 'Pane B<div class="toast" id="t2">Later</div></div>')
    session = runtime.new_session(document)
    server = ServerSession(session)
    session.channel.open()

    server.show_toast("t2", delay=150)
    server.remove_tab("tabs", "b")
    assert session.wait_idle(timeout=5)
    # 타이머가 toast 없는 트리에서 만료
    time.sleep(0.5)

    server.update_progress("p1", 57)

    assert session.wait_idle(timeout=5)
    assert session.thread.is_alive()
    assert find_by_id(session.document, "p1").get_style("width") == "57%"
    assert session.errors == []
    server.collect_inputs()
    assert "t2" not in server.inputs


def test_close_waits_for_consumer(runtime):
    session = runtime.new_session(DOCUMENT)
    server = ServerSession(session)
    session.channel.open()

    server.insert_tab("tabs", tab_panel("C", Tag("p", script("slow")), value="c"), target="b")
    session.close()

    assert not session.thread.is_alive()
    assert session.document is None


def test_task_error_is_recorded_in_synchronous_mode(session):
    def lookup():
        raise AnchorNotFoundError("gone")

    session.task_runner.schedule_task(Task(lookup))
    session.run_until_idle()

    assert isinstance(session.errors[0], AnchorNotFoundError)
    assert not session.task_runner.has_tasks()
