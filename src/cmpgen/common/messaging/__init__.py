from .bus import MessageBus, bus
from .catalog import MessageCatalog
from .pointer import L, SemanticPointer
from .protocols import Renderer

__all__ = ["MessageBus", "bus", "MessageCatalog", "L", "SemanticPointer", "Renderer"]
