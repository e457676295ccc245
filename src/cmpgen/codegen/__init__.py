from .imports import ImportSet, NameAllocator
from .synthesizer import GENERATED_HEADER, GENERATED_MARKER, CodeSynthesizer

__all__ = [
    "CodeSynthesizer",
    "GENERATED_HEADER",
    "GENERATED_MARKER",
    "ImportSet",
    "NameAllocator",
]
