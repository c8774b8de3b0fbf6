"""Session-scoped stores for derived analysis artifacts."""

from .analysis_cache import AnalysisCache

__all__ = ["AnalysisCache"]
