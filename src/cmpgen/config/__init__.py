from .loader import CmpgenConfig, load_config_from_path

__all__ = ["CmpgenConfig", "load_config_from_path"]
