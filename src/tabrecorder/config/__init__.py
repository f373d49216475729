"""tabrecorder configuration package.

Configuration is stored as YAML and validated into Pydantic models.
"""

from .manager import ConfigManager
from .models import TabRecorderConfig

__all__ = [
    "ConfigManager",
    "TabRecorderConfig",
]
