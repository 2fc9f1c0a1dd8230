from __future__ import annotations

import json
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any


class RenditionMode(str, Enum):
    AUTOMATIC = "automatic"
    SIMPLE = "simple"


# Settings files use the camelCase keys of the exported control state.
_SETTINGS_KEYS: dict[str, str] = {
    "horizontalTolerance": "horizontal_tolerance",
    "verticalProximity": "vertical_proximity",
    "yAxisTolerance": "y_axis_tolerance",
    "titleRatio": "title_ratio",
}


@dataclass(frozen=True, slots=True)
class ReconstructConfig:
    """
    Layout reconstruction parameters.

    Defaults are explicit constants. Values are used as given by the pipeline;
    range checks happen where configuration enters (settings files, CLI).
    """

    horizontal_tolerance: float = 10.0  # block grouping: max left-edge offset
    vertical_proximity: float = 10.0  # block grouping: max vertical gap
    y_axis_tolerance: float = 5.0  # label/value pairing: max top-edge offset
    title_ratio: float = 2.0  # title: height > median_height * ratio
    rendition_mode: RenditionMode = RenditionMode.AUTOMATIC

    def validate(self) -> None:
        if self.horizontal_tolerance < 0:
            raise ValueError("horizontal_tolerance must be >= 0")
        if self.vertical_proximity < 0:
            raise ValueError("vertical_proximity must be >= 0")
        if self.y_axis_tolerance < 0:
            raise ValueError("y_axis_tolerance must be >= 0")
        if self.title_ratio <= 0:
            raise ValueError("title_ratio must be > 0")

    def to_params(self) -> dict[str, Any]:
        return {
            "horizontal_tolerance": self.horizontal_tolerance,
            "vertical_proximity": self.vertical_proximity,
            "y_axis_tolerance": self.y_axis_tolerance,
            "title_ratio": self.title_ratio,
            "rendition_mode": self.rendition_mode.value,
        }

    def to_settings(self) -> dict[str, Any]:
        out: dict[str, Any] = {"renditionMode": self.rendition_mode.value}
        for camel, attr in _SETTINGS_KEYS.items():
            out[camel] = getattr(self, attr)
        return out

    @staticmethod
    def from_settings(d: dict[str, Any], *, base: "ReconstructConfig | None" = None) -> "ReconstructConfig":
        """
        Merge a settings mapping over `base` (defaults when None).

        Accepts camelCase or snake_case keys. Values of the wrong type are ignored so that
        settings written by older versions still load. Unknown keys are ignored.
        """

        cfg = base if base is not None else ReconstructConfig()
        updates: dict[str, Any] = {}
        for camel, attr in _SETTINGS_KEYS.items():
            for key in (camel, attr):
                v = d.get(key)
                if isinstance(v, (int, float)) and not isinstance(v, bool):
                    updates[attr] = float(v)
                    break

        mode_raw = d.get("renditionMode", d.get("rendition_mode"))
        if isinstance(mode_raw, str):
            mode = _parse_rendition_mode(mode_raw)
            if mode is not None:
                updates["rendition_mode"] = mode

        return replace(cfg, **updates)


def _parse_rendition_mode(s: str) -> RenditionMode | None:
    s = s.strip().lower()
    if s == "manual":
        return RenditionMode.SIMPLE
    try:
        return RenditionMode(s)
    except ValueError:
        return None


def load_settings(path: Path, *, base: ReconstructConfig | None = None) -> ReconstructConfig:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"settings file must contain a JSON object: {path}")
    cfg = ReconstructConfig.from_settings(raw, base=base)
    cfg.validate()
    return cfg


def save_settings(config: ReconstructConfig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_settings(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
