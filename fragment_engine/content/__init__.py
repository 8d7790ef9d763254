# 라이브 트리 변경 (탭 삽입/제거/선택, 위젯)
from .injector import FragmentInjector, FragmentState
from .widgets import WidgetController

__all__ = [
    'FragmentInjector',
    'FragmentState',
    'WidgetController',
]
