"""
Centralized prompt loading with caching.
Loads prompts once from YAML and caches for performance.
"""

import yaml
from pathlib import Path
from functools import lru_cache

PROMPTS_PATH = Path(__file__).parent.parent / "prompts.yaml"


@lru_cache(maxsize=1)
def load_prompts() -> dict:
    """
    Loads system instructions and fixed user-facing strings from YAML.
    Only loads once and reuses the result.

    Raises:
        FileNotFoundError: If prompts.yaml is not found
    """
    with open(PROMPTS_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)
