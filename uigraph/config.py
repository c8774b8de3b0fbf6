"""Configuration loading for uigraph (.uigraph.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".uigraph.yml"

DEFAULT_EXTENSIONS = [".tsx", ".ts", ".jsx", ".js"]
DEFAULT_ALIAS_PREFIXES = ["@/", "~/"]
DEFAULT_RESERVED_PREFIXES = ["react", "next"]
DEFAULT_ROOT_MARKERS = ["tsconfig.json", "package.json"]
DEFAULT_CLASS_HELPERS = ["cn", "clsx", "classnames", "twMerge"]
DEFAULT_COVERAGE_PATH = "coverage/coverage-final.json"

# Files whose compilerOptions drive alias resolution.
PROJECT_CONFIG_NAMES = ("tsconfig.json", "jsconfig.json")

# Ordered: the first library whose pattern is a substring of the specifier wins.
DEFAULT_LIBRARY_PATTERNS: Dict[str, List[str]] = {
    "shadcn": ["@/components/ui", "@radix-ui/", "components/ui/"],
    "mui": ["@mui/material", "@mui/icons-material", "@emotion/"],
    "chakra": ["@chakra-ui/"],
    "antd": ["antd", "@ant-design/"],
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ResolverConfig:
    """Module resolution settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    alias_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_ALIAS_PREFIXES))
    reserved_prefixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_RESERVED_PREFIXES)
    )
    root_markers: List[str] = field(default_factory=lambda: list(DEFAULT_ROOT_MARKERS))


@dataclass
class CoverageConfig:
    """Where the coverage producer writes its Istanbul JSON."""

    path: str = DEFAULT_COVERAGE_PATH


@dataclass
class UIGraphConfig:
    """Represents the settings defined in .uigraph.yml."""

    root: Optional[Path] = None
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    libraries: Dict[str, List[str]] = field(
        default_factory=lambda: {name: list(p) for name, p in DEFAULT_LIBRARY_PATTERNS.items()}
    )
    class_helpers: List[str] = field(default_factory=lambda: list(DEFAULT_CLASS_HELPERS))
    coverage: CoverageConfig = field(default_factory=CoverageConfig)


def load_config(config_path: Path) -> UIGraphConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return UIGraphConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = UIGraphConfig(root=root)

    resolver_data = _as_dict(data.get("resolver"))
    if resolver_data:
        extensions = _as_str_list(resolver_data.get("extensions"))
        if extensions:
            config.resolver.extensions = [_normalise_extension(ext) for ext in extensions]
        if "alias_prefixes" in resolver_data:
            config.resolver.alias_prefixes = _as_str_list(resolver_data.get("alias_prefixes"))
        if "reserved_prefixes" in resolver_data:
            config.resolver.reserved_prefixes = _as_str_list(
                resolver_data.get("reserved_prefixes")
            )
        markers = _as_str_list(resolver_data.get("root_markers"))
        if markers:
            config.resolver.root_markers = markers

    libraries_data = data.get("libraries")
    if libraries_data is not None:
        if not isinstance(libraries_data, dict):
            raise ConfigError("'libraries' must map library names to pattern lists")
        config.libraries = {
            str(name): _as_str_list(patterns) for name, patterns in libraries_data.items()
        }

    if "class_helpers" in data:
        config.class_helpers = _as_str_list(data.get("class_helpers"))

    coverage_data = _as_dict(data.get("coverage"))
    coverage_path = _as_str(coverage_data.get("path")) if coverage_data else None
    if coverage_path:
        config.coverage.path = coverage_path

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _normalise_extension(value: str) -> str:
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "ConfigError",
    "CoverageConfig",
    "ResolverConfig",
    "UIGraphConfig",
    "load_config",
]
