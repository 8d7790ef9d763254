import time

from fragment_engine.common import AnchorNotFoundError
from fragment_engine.dom import find_by_id


def wait_for_task(session, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not session.task_runner.has_tasks():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


def test_progress_changes_only_width(session, server):
    bar = find_by_id(session.document, "p1")
    attributes = dict(bar.attributes)
    children = list(bar.children)

    server.update_progress("p1", 57)
    session.run_until_idle()

    assert bar.attributes["style"] == "width: 57%; height: 4px"
    assert {k: v for k, v in bar.attributes.items() if k != "style"} == \
        {k: v for k, v in attributes.items() if k != "style"}
    assert bar.children == children


def test_progress_is_clamped(session, server):
    bar = find_by_id(session.document, "p1")

    server.update_progress("p1", 150)
    session.run_until_idle()
    assert bar.get_style("width") == "100%"

    server.update_progress("p1", -3)
    session.run_until_idle()
    assert bar.get_style("width") == "0%"

    server.update_progress("p1", 12.5)
    session.run_until_idle()
    assert bar.get_style("width") == "12.5%"


def test_progress_unknown_id(session, server):
    server.update_progress("nope", 10)
    session.run_until_idle()

    assert isinstance(session.errors[0], AnchorNotFoundError)


def test_toast_show_and_dismiss(session, server):
    toast = find_by_id(session.document, "t1")

    server.show_toast("t1", animation=False, autohide=False)
    session.run_until_idle()

    assert toast.has_class("show")
    assert toast.attributes["data-bs-autohide"] == "false"
    assert toast.attributes["data-bs-animation"] == "false"
    assert not session.task_runner.has_tasks()

    session.dismiss_toast("t1")
    session.run_until_idle()

    assert not toast.has_class("show")
    assert toast.has_class("hide")
    server.collect_inputs()
    assert server.inputs == {"t1": False}


def test_toast_autohide(session, server):
    toast = find_by_id(session.document, "t1")

    server.show_toast("t1", delay=20)
    session.run_until_idle()
    assert toast.has_class("show")

    assert wait_for_task(session)
    session.run_until_idle()

    assert not toast.has_class("show")
    server.collect_inputs()
    assert server.inputs == {"t1": False}


def test_dropdown_show_and_close(session, server):
    dropdown = find_by_id(session.document, "dd")
    toggle, menu = dropdown.children

    server.show_dropdown("dd")
    session.run_until_idle()

    assert dropdown.has_class("show")
    assert menu.has_class("show")
    assert toggle.attributes["aria-expanded"] == "true"

    session.close_dropdown("dd")
    session.run_until_idle()

    assert not dropdown.has_class("show")
    assert not menu.has_class("show")
    assert toggle.attributes["aria-expanded"] == "false"
