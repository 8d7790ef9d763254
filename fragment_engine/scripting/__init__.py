# JavaScript execution (dukpy)
from .js_context import JSContext

__all__ = ['JSContext']
