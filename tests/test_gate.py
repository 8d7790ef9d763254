import logging

from fragment_engine.session import GateState, LifecycleGate


def test_connecting_queues_until_ready():
    delivered = []
    gate = LifecycleGate(delivered.append, capacity=10)

    for n in range(3):
        assert gate.offer(n)

    assert delivered == []
    assert gate.queued == 3


def test_ready_replays_in_order_once():
    delivered = []
    gate = LifecycleGate(delivered.append, capacity=10)
    gate.offer("a")
    gate.offer("b")

    assert gate.mark_ready() is True
    assert gate.mark_ready() is False
    gate.offer("c")

    assert delivered == ["a", "b", "c"]
    assert gate.state is GateState.READY
    assert gate.queued == 0


def test_overflow_drops_newest(caplog):
    delivered = []
    gate = LifecycleGate(delivered.append, capacity=2)

    with caplog.at_level(logging.WARNING):
        assert gate.offer(1)
        assert gate.offer(2)
        assert gate.offer(3) is False

    gate.mark_ready()
    assert delivered == [1, 2]
    assert "queue full" in caplog.text


def test_close_discards_queue(caplog):
    delivered = []
    gate = LifecycleGate(delivered.append, capacity=10)
    gate.offer("a")

    with caplog.at_level(logging.WARNING):
        gate.close()
        assert gate.offer("b") is False

    assert gate.mark_ready() is False
    assert delivered == []
    assert gate.state is GateState.CLOSED
    assert caplog.text.count("dropping") == 2
