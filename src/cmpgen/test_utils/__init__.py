from .bus import SpyBus
from .helpers import analyze_code, create_test_app, imported_package
from .workspace import WorkspaceFactory

__all__ = [
    "SpyBus",
    "WorkspaceFactory",
    "analyze_code",
    "create_test_app",
    "imported_package",
]
