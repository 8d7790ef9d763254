# Chrome trace-format profiling
from .measure_time import Tracer, MeasureTime, set_thread_name

__all__ = ['Tracer', 'MeasureTime', 'set_thread_name']
