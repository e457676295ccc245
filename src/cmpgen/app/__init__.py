from .core import CmpgenApp, FileReport

__all__ = ["CmpgenApp", "FileReport"]
