"""Per-scenario identity and ad-hoc data, created at scenario start."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from loguru import logger

UNTAGGED = "untagged"

# Markers that never act as classification tags
_BUILTIN_MARKERS = {
    "parametrize", "skip", "skipif", "xfail", "usefixtures", "filterwarnings",
    "ui", "unit", "live", "asyncio",
}


@dataclass
class ScenarioContext:
    """
    Attributes:
        name: Scenario name
        feature_tag: First classification tag
        scenario_tag: Second classification tag
        data: Values stored by steps for later steps of the same scenario
    """
    name: str
    feature_tag: str = UNTAGGED
    scenario_tag: str = UNTAGGED
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_markers(cls, name: str, marker_names: Iterable[str]) -> "ScenarioContext":
        """Build from test markers; the first two custom markers become the tags."""
        tags = [
            m for m in marker_names
            if m not in _BUILTIN_MARKERS and not m.startswith("allure")
        ]
        return cls(
            name=name,
            feature_tag=tags[0] if tags else UNTAGGED,
            scenario_tag=tags[1] if len(tags) > 1 else UNTAGGED,
        )

    @property
    def label(self) -> str:
        return f"{self.feature_tag}:{self.scenario_tag}"

    def store(self, key: str, value: Any) -> None:
        logger.debug(f"Scenario data {key} = {value!r}")
        self.data[key] = value

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self.data.get(key, default)

    def screenshot_name(self, timestamp: str) -> str:
        """File name for a failure screenshot, scenario name capped at 40 chars."""
        safe = re.sub(r"[^A-Za-z0-9]", "", self.name)[:40]
        return f"{self.feature_tag}_{safe}_{timestamp}_Error.png"


__all__ = ["ScenarioContext", "UNTAGGED"]
