# Server-side UI tree and fragment serialization
from .fragment import Fragment, FragmentKind
from .tag import Tag, TabPanel, tab_panel
from .serializer import FragmentSerializer

__all__ = [
    'Fragment',
    'FragmentKind',
    'Tag',
    'TabPanel',
    'tab_panel',
    'FragmentSerializer',
]
