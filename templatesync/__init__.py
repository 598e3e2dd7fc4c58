"""Template-to-target workspace scaffolding and label-based synchronization."""

from .config import ConfigError, SyncConfig, load_config
from .copier import Copier
from .labels import Label
from .synchronizer import Synchronizer

__all__ = [
    "ConfigError",
    "Copier",
    "Label",
    "SyncConfig",
    "Synchronizer",
    "load_config",
]
