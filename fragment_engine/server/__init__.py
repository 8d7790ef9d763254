# Server-side API: serialize UI changes and send them to a session
from .api import ServerSession

__all__ = ['ServerSession']
