# Session lifecycle: gate, consumer thread, tasks
from .gate import LifecycleGate, GateState
from .task import Task, TaskRunner
from .session_thread import SessionThread, Event, EventType
from .session import Session

__all__ = [
    'LifecycleGate',
    'GateState',
    'Task',
    'TaskRunner',
    'SessionThread',
    'Event',
    'EventType',
    'Session',
]
