# Core runtime: shared network thread and session registry
from .runtime import Runtime

__all__ = ['Runtime']
