from .messaging import L, MessageBus, MessageCatalog, SemanticPointer, bus

# Help texts and other static strings resolve through the bus catalog.
catalog = bus.catalog

__all__ = ["bus", "catalog", "L", "MessageBus", "MessageCatalog", "SemanticPointer"]
