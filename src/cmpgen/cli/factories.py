from pathlib import Path
from typing import Optional

from cmpgen.app import CmpgenApp
from cmpgen.common import L, bus
from cmpgen.config import CmpgenConfig, load_config_from_path
from cmpgen.spec import ConfigError


def get_project_root() -> Path:
    return Path.cwd()


def make_app(
    directory: Path,
    target_module: Optional[str] = None,
    target_function: Optional[str] = None,
    suffix: Optional[str] = None,
    prune_imports: Optional[bool] = None,
) -> Optional[CmpgenApp]:
    # Composition Root: configuration comes from the pyproject.toml nearest to
    # the analyzed directory, CLI options win over it.
    root_path = get_project_root()
    search_path = directory if directory.is_absolute() else root_path / directory
    try:
        config: CmpgenConfig = load_config_from_path(search_path)
    except ConfigError as e:
        bus.error(L.error.config, error=e)
        return None

    config = config.with_overrides(
        target_module=target_module,
        target_function=target_function,
        suffix=suffix,
        prune_imports=prune_imports,
    )
    return CmpgenApp(root_path=root_path, config=config)
