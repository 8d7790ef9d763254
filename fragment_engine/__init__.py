# Fragment Engine Package
# Incremental UI fragment injection with idempotent asset loading

__version__ = "1.0.0"
__author__ = "Fragment Engine Project"

# Re-export main classes for convenience
from .core.runtime import Runtime
from .session import Session
from .server import ServerSession
from .tags import Tag, tab_panel
from .assets import AssetRef, AssetKind
from .common import RuntimeConfig, configure_logging

__all__ = [
    'Runtime',
    'Session',
    'ServerSession',
    'Tag',
    'tab_panel',
    'AssetRef',
    'AssetKind',
    'RuntimeConfig',
    'configure_logging',
]
