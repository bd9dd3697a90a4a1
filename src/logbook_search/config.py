"""Configuration loading for the logbook search service.

Supports three formats, searched in the project root:
1. Python config via .py - a CONFIG dict, for computed settings
2. TOML config via .toml - most users
3. JSON config via .json
"""

from __future__ import annotations

import importlib.util
import json
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .models import DEFAULT_SORT_FIELD

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


@dataclass
class SearchConfig:
    """Configuration for search compilation and execution."""

    # Service identification (reported by service_info)
    service_name: str = "Logbook Search"
    version: str = "1.0.0"

    # Elasticsearch connection
    hosts: list[str] = field(default_factory=lambda: ["http://localhost:9200"])
    index: str = "olog_logs"

    # Pagination bounds
    default_size: int = DEFAULT_PAGE_SIZE
    max_size: int = MAX_PAGE_SIZE

    # Creation timestamp field, the single sort key
    timestamp_field: str = DEFAULT_SORT_FIELD

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check pagination bounds.

        Raises:
            ValueError: If max_size < 1 or default_size is outside 1..max_size
        """
        if self.max_size < 1:
            raise ValueError(f"max_size must be positive: {self.max_size}")
        if not 1 <= self.default_size <= self.max_size:
            raise ValueError(
                f"default_size must be between 1 and max_size ({self.max_size}): "
                f"{self.default_size}"
            )


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_python_config(path: Path) -> dict[str, Any]:
    """Load configuration from Python file.

    Convention:
        - CONFIG dict or config dict for static configuration
    """
    spec = importlib.util.spec_from_file_location("logbook_search_config", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load Python config from {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["logbook_search_config"] = module
    spec.loader.exec_module(module)

    if hasattr(module, "CONFIG"):
        return module.CONFIG
    if hasattr(module, "config"):
        return module.config
    return {}


def dict_to_config(data: dict[str, Any]) -> SearchConfig:
    """Convert dictionary to SearchConfig."""
    kwargs: dict[str, Any] = {}

    if "service" in data:
        service = data["service"]
        if "name" in service:
            kwargs["service_name"] = service["name"]
        if "version" in service:
            kwargs["version"] = str(service["version"])

    if "elasticsearch" in data:
        es = data["elasticsearch"]
        if "hosts" in es:
            hosts = es["hosts"]
            kwargs["hosts"] = [hosts] if isinstance(hosts, str) else list(hosts)
        if "index" in es:
            kwargs["index"] = es["index"]

    if "search" in data:
        search = data["search"]
        if "default_size" in search:
            kwargs["default_size"] = int(search["default_size"])
        if "max_size" in search:
            kwargs["max_size"] = int(search["max_size"])
        if "timestamp_field" in search:
            kwargs["timestamp_field"] = search["timestamp_field"]

    return SearchConfig(**kwargs)


def find_config_file(project_root: Path) -> Optional[Path]:
    """Find configuration file in project root.

    Search order:
    1. logbook_search.py (most flexible)
    2. logbook_search.toml
    3. logbook_search.json
    4. .logbook_search.toml
    5. .logbook_search.json
    """
    candidates = [
        "logbook_search.py",
        "logbook_search.toml",
        "logbook_search.json",
        ".logbook_search.toml",
        ".logbook_search.json",
    ]

    for name in candidates:
        path = project_root / name
        if path.exists():
            return path

    return None


def load_config(project_root: Path, config_path: Optional[Path] = None) -> SearchConfig:
    """Load search configuration.

    Args:
        project_root: Directory searched for a config file
        config_path: Optional explicit path to config file

    Returns:
        SearchConfig instance
    """
    if config_path is None:
        config_path = find_config_file(project_root)

    if config_path is None:
        # No config file - use defaults
        return SearchConfig()

    suffix = config_path.suffix.lower()

    if suffix == ".py":
        return dict_to_config(load_python_config(config_path))

    elif suffix == ".toml":
        return dict_to_config(load_toml_config(config_path))

    elif suffix == ".json":
        return dict_to_config(load_json_config(config_path))

    else:
        raise ValueError(f"Unsupported config file type: {suffix}")
