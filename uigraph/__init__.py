"""Cross-file static analysis for component-based UI codebases."""

from .checks import MixedLibraryCheck
from .config import ConfigError, UIGraphConfig, load_config
from .engine import AnalysisEngine
from .models import FileCategory

__all__ = [
    "AnalysisEngine",
    "ConfigError",
    "FileCategory",
    "MixedLibraryCheck",
    "UIGraphConfig",
    "load_config",
]
