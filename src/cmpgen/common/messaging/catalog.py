import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from .pointer import SemanticPointer

log = logging.getLogger(__name__)

_ASSETS_ROOT = Path(__file__).resolve().parent.parent / "assets"


class MessageCatalog:
    """
    Resolves semantic pointers to message templates.

    Templates live in JSON files under ``<root>/needle/<lang>/``, with fully
    qualified keys at the top level. Later roots override earlier ones.

    Lookup Order:
    1. Target language (``CMPGEN_LANG``, default ``en``)
    2. Default language
    3. Identity (the key itself)
    """

    def __init__(self, roots: Optional[List[Path]] = None, default_lang: str = "en"):
        self.default_lang = default_lang
        self.roots: List[Path] = list(roots) if roots is not None else [_ASSETS_ROOT]
        self._registry: Dict[str, Dict[str, str]] = {}

    def add_root(self, path: Path) -> None:
        if path not in self.roots:
            self.roots.append(path)
            self._registry.clear()

    def _load_directory(self, directory: Path) -> Dict[str, str]:
        registry: Dict[str, str] = {}
        for file_path in sorted(directory.rglob("*.json")):
            try:
                with file_path.open("r", encoding="utf-8") as f:
                    content = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                log.warning("Ignoring malformed message file %s: %s", file_path, e)
                continue
            for key, value in content.items():
                registry[key] = str(value)
        return registry

    def _ensure_lang_loaded(self, lang: str) -> Dict[str, str]:
        if lang not in self._registry:
            merged: Dict[str, str] = {}
            for root in self.roots:
                directory = root / "needle" / lang
                if directory.is_dir():
                    merged.update(self._load_directory(directory))
            self._registry[lang] = merged
        return self._registry[lang]

    def get(self, pointer: Union[SemanticPointer, str], lang: Optional[str] = None) -> str:
        key = str(pointer)
        target_lang = lang or os.getenv("CMPGEN_LANG", self.default_lang)

        value = self._ensure_lang_loaded(target_lang).get(key)
        if value is not None:
            return value

        if target_lang != self.default_lang:
            value = self._ensure_lang_loaded(self.default_lang).get(key)
            if value is not None:
                return value

        return key
