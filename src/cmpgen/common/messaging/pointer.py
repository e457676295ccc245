from typing import Any, Union


class SemanticPointer:
    """
    A dotted message address built by attribute access.

    ``L.generate.file.success`` points at the catalog key
    ``"generate.file.success"``.
    """

    __slots__ = ("_path",)

    def __init__(self, path: str = ""):
        self._path = path

    def __getattr__(self, name: str) -> "SemanticPointer":
        if name.startswith("__"):
            raise AttributeError(name)
        new_path = f"{self._path}.{name}" if self._path else name
        return SemanticPointer(new_path)

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"<L: '{self._path}'>" if self._path else "<L: (root)>"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SemanticPointer):
            return self._path == other._path
        return str(other) == self._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __truediv__(self, other: Union[str, "SemanticPointer"]) -> "SemanticPointer":
        suffix = str(other).strip(".")
        if not suffix:
            return self
        new_path = f"{self._path}.{suffix}" if self._path else suffix
        return SemanticPointer(new_path)


L = SemanticPointer()
