import copy
import json
import os
import sys
from typing import Any, Dict, List, Optional

import yaml

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

ENV_PREFIX = "DSE_"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "version": "1.0.0",
    "paths": {
        "articles_dir": "./articles",
        "output_dir": "./docs",
        "index_file": "search-index.json",
        "stats_file": "search-stats.json",
    },
    "site": {
        "base_url": "https://tonyycsw-lgtm.github.io/dse-chinese-articles12pcs",
        "title": "DSE中文指定篇章學習平台",
    },
    "defaults": {
        "title": "未命名文章",
        "author": "佚名",
        "source": "未知",
        "genre": "未知體裁",
        "importance": 3,
    },
    "search": {
        "excerpt_length": 150,
        "content_sample_length": 500,
        "default_limit": 10,
        "default_fields": ["title", "content", "tags"],
        "field_weights": {
            "title": 10,
            "tags": 5,
            "dse_focus": 3,
            "author": 2,
            "content": 1,
            "genre": 1,
        },
        "importance_multiplier": 2,
        "related_limit": 5,
        "popular_searches": [
            {"term": "荀子", "count": 100},
            {"term": "孟子", "count": 85},
            {"term": "莊子", "count": 75},
            {"term": "學習", "count": 65},
            {"term": "DSE", "count": 60},
            {"term": "比喻", "count": 55},
            {"term": "論證", "count": 50},
            {"term": "文言文", "count": 45},
            {"term": "作文", "count": 40},
            {"term": "考試", "count": 35},
        ],
    },
}


class Settings:
    """
    Loads build and search settings from a JSON or YAML file.

    Values from the file are deep-merged over DEFAULT_SETTINGS, then
    environment variables of the form DSE_<SECTION>_<KEY> are applied
    (for example DSE_SEARCH_EXCERPT_LENGTH=120).
    """

    def __init__(self, settings_file: Optional[str] = None) -> None:
        """
        :param settings_file: Optional path to a .json/.yml/.yaml file. When given,
            the file must exist; a missing file is fatal.
        """
        self.raw: Dict[str, Any] = copy.deepcopy(DEFAULT_SETTINGS)

        if settings_file:
            if not os.path.isfile(settings_file):
                logger.critical("Settings file not found at '%s'. Exiting...", settings_file)
                sys.exit(1)

            loaded = self._load_file(settings_file)
            if loaded:
                self.raw = _deep_merge(self.raw, loaded)
                logger.info("Settings loaded from '%s'.", settings_file)
            else:
                logger.warning(
                    "Settings file '%s' is empty or invalid, using defaults", settings_file
                )

        self.raw = _apply_env_overrides(self.raw)

        self.version: str = str(self.raw.get("version", "1.0.0"))

        paths = self.raw.get("paths", {})
        self.articles_dir: str = paths.get("articles_dir", "./articles")
        self.output_dir: str = paths.get("output_dir", "./docs")
        self.index_file: str = paths.get("index_file", "search-index.json")
        self.stats_file: str = paths.get("stats_file", "search-stats.json")

        site = self.raw.get("site", {})
        self.base_url: str = site.get("base_url", "")
        self.site_title: str = site.get("title", "")

        self.meta_defaults: Dict[str, Any] = dict(self.raw.get("defaults", {}))

        search = self.raw.get("search", {})
        self.excerpt_length: int = int(search.get("excerpt_length", 150))
        self.content_sample_length: int = int(search.get("content_sample_length", 500))
        self.default_limit: int = int(search.get("default_limit", 10))
        self.default_fields: List[str] = list(
            search.get("default_fields", ["title", "content", "tags"])
        )
        self.field_weights: Dict[str, int] = dict(search.get("field_weights", {}))
        self.importance_multiplier: int = int(search.get("importance_multiplier", 2))
        self.related_limit: int = int(search.get("related_limit", 5))
        self.popular_searches: List[Dict[str, Any]] = list(
            search.get("popular_searches", [])
        )

    @property
    def index_path(self) -> str:
        return os.path.join(self.output_dir, self.index_file)

    @property
    def stats_path(self) -> str:
        return os.path.join(self.output_dir, self.stats_file)

    def _load_file(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Loads a JSON or YAML mapping from the given path.

        :return: The parsed mapping, or None if the file cannot be read or parsed.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.endswith((".yml", ".yaml")):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
            logger.error("Error loading settings file '%s': %s", path, e)
            return None

        if not isinstance(data, dict):
            return None
        return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply DSE_<SECTION>_<KEY>=value overrides.

    The first part after the prefix names the section; the rest is the key,
    so DSE_SEARCH_EXCERPT_LENGTH sets config["search"]["excerpt_length"].
    """
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        parts = env_key[len(ENV_PREFIX) :].lower().split("_", 1)
        if len(parts) < 2 or not parts[1]:
            continue

        section, key = parts
        current = config.setdefault(section, {})
        if not isinstance(current, dict):
            logger.warning("Ignoring %s: '%s' is not a section", env_key, section)
            continue
        current[key] = _convert_env_value(env_value)

    return config


def _convert_env_value(value: str) -> Any:
    """Convert an environment string to bool, int, float, list or str."""
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if "," in value:
        return [item.strip() for item in value.split(",")]

    return value
