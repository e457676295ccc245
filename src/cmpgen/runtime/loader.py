import importlib
import logging
import pkgutil
from types import ModuleType
from typing import List, Union

log = logging.getLogger(__name__)


def import_companions(
    package: Union[str, ModuleType], suffix: str = "_generated"
) -> List[ModuleType]:
    """
    Imports every companion module directly inside ``package``.

    Generated modules register their comparators as a side effect of being
    imported. Applications that do not import each companion explicitly can
    call this once at start-up.
    """
    if isinstance(package, str):
        package = importlib.import_module(package)

    search_path = getattr(package, "__path__", None)
    if search_path is None:
        raise ValueError(f"'{package.__name__}' is not a package")

    loaded: List[ModuleType] = []
    for info in sorted(pkgutil.iter_modules(search_path), key=lambda i: i.name):
        if info.ispkg or not info.name.endswith(suffix):
            continue
        qualified = f"{package.__name__}.{info.name}"
        log.debug("Importing companion module %s", qualified)
        loaded.append(importlib.import_module(qualified))
    return loaded
