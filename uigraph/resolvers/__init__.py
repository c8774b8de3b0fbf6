"""Module and export resolution."""

from .base import ResolverStrategy
from .exports import ExportResolver
from .module import AliasRootResolver, ModuleResolver, RelativeResolver
from .tsconfig import TsconfigResolver

__all__ = [
    "AliasRootResolver",
    "ExportResolver",
    "ModuleResolver",
    "RelativeResolver",
    "ResolverStrategy",
    "TsconfigResolver",
]
