import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List

from cmpgen.spec import CallTarget, ConfigError

if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib


@dataclass
class CmpgenConfig:
    target_module: str = "cmpgen"
    target_function: str = "cmp_by_fields"
    reexports: List[str] = field(
        default_factory=lambda: ["cmpgen.runtime", "cmpgen.runtime.registry"]
    )
    register_function: str = "register"
    suffix: str = "_generated"
    prune_imports: bool = True

    @property
    def call_target(self) -> CallTarget:
        return CallTarget(self.target_module, self.target_function, tuple(self.reexports))

    def with_overrides(self, **overrides: Any) -> "CmpgenConfig":
        # CLI options left unset arrive as None.
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _find_pyproject_toml(search_path: Path) -> Path:
    current_dir = search_path.resolve()
    while current_dir.parent != current_dir:
        pyproject_path = current_dir / "pyproject.toml"
        if pyproject_path.is_file():
            return pyproject_path
        current_dir = current_dir.parent
    raise FileNotFoundError("Could not find pyproject.toml in any parent directory.")


def _validate(data: Dict[str, Any], source: Path) -> Dict[str, Any]:
    known = {f.name: f for f in fields(CmpgenConfig)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"{source}: unknown [tool.cmpgen] keys: {', '.join(unknown)}")

    for key, value in data.items():
        default = getattr(CmpgenConfig(), key)
        if isinstance(default, bool):
            ok = isinstance(value, bool)
        elif isinstance(default, list):
            ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
        else:
            ok = isinstance(value, str) and bool(value)
        if not ok:
            raise ConfigError(f"{source}: invalid value for '{key}': {value!r}")
    return data


def load_config_from_path(search_path: Path) -> CmpgenConfig:
    try:
        config_path = _find_pyproject_toml(search_path)
    except FileNotFoundError:
        return CmpgenConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{config_path}: {e}") from e

    cmpgen_data: Dict[str, Any] = data.get("tool", {}).get("cmpgen", {})
    return CmpgenConfig(**_validate(cmpgen_data, config_path))
