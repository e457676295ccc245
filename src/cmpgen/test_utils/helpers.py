import importlib
import sys
from contextlib import contextmanager
from pathlib import Path
from textwrap import dedent
from typing import Iterator, List, Tuple

from cmpgen.analysis import CallSiteAnalyzer, SourceFile
from cmpgen.app import CmpgenApp
from cmpgen.config import CmpgenConfig
from cmpgen.spec import CallInfo, CallTarget


def create_test_app(root_path: Path, **config_overrides) -> CmpgenApp:
    config = CmpgenConfig().with_overrides(**config_overrides)
    return CmpgenApp(root_path=root_path, config=config)


def analyze_code(
    path: Path, code: str, target: CallTarget = CallTarget("cmpgen", "cmp_by_fields")
) -> Tuple[SourceFile, List[CallInfo]]:
    """Writes ``code`` to ``path`` and collects its call sites of ``target``."""
    code = dedent(code)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(code, encoding="utf-8")
    source = SourceFile.parse(path, code)
    return source, CallSiteAnalyzer(target).collect(source)


@contextmanager
def imported_package(root_path: Path, package: str) -> Iterator[None]:
    """
    Makes ``package`` under ``root_path`` importable for the duration of a test.

    Modules imported from it are dropped afterwards so later tests start
    from a clean import state.
    """
    sys.path.insert(0, str(root_path))
    importlib.invalidate_caches()
    try:
        yield
    finally:
        sys.path.remove(str(root_path))
        for name in list(sys.modules):
            if name == package or name.startswith(f"{package}."):
                del sys.modules[name]
