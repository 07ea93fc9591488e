from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

from greenquote.core.settings import settings
from greenquote.schemas.pricing import PricingConfig

from .estimator import EstimatorSettings


@dataclass(frozen=True)
class LawnRules:
    pricing: PricingConfig
    estimator: EstimatorSettings


def load_yaml(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Rules file not found: {path}")
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_rules(raw: Dict[str, Any]) -> LawnRules:
    return LawnRules(
        pricing=PricingConfig.model_validate(raw.get("pricing") or {}),
        estimator=EstimatorSettings.from_dict(raw.get("estimator")),
    )


@lru_cache(maxsize=4)
def load_lawn_rules(path: str | None = None) -> LawnRules:
    return parse_rules(load_yaml(path or settings.LAWN_RULES_PATH))
