# src/inputs/inputs.py
"""
Settings and answers loader for the flatmate listing wizard CLI.

Goals
-----
- File-first configuration with validation via Pydantic.
- Minimal environment-variable overrides for CI/CLI convenience.
- A replayable "answers" file so a whole wizard run can be scripted.

Supported JSON shapes
---------------------
1) Settings (root = WizardSettings)
   {
     "api_base_url": "https://api.example.com/api",
     "timeout_s": 15,
     "user_agent": "FlatmateWizard/1.0",
     "probe_images": true
   }

2) Answers (root = WizardAnswers)
   {
     "fields": { "goal": "Rent", "property_type": "Flat", "city": "Pune", ... },
     "distance_unit": "km",
     "images": ["https://cdn.example.com/a.jpg", ...],
     "points": [
       {"category": "Transit", "type": "Bus Stop", "distance": "2"},
       {"category": "Utility", "type": "ATM", "name": "SBI ATM", "distance": "0.5"}
     ]
   }

Environment overrides (optional)
--------------------------------
- FLATMATE_API_BASE_URL -> WizardSettings.api_base_url
- FLATMATE_TIMEOUT      -> WizardSettings.timeout_s (float)
- FLATMATE_USER_AGENT   -> WizardSettings.user_agent
- FLATMATE_PROBE_IMAGES -> WizardSettings.probe_images (1/true/yes/on)

Public API
----------
- class SettingsLoader:
    - load(path: str | Path | None) -> WizardSettings
    - load_json(text: str) -> WizardSettings
    - load_answers(path: str | Path) -> WizardAnswers
    - load_answers_json(text: str) -> WizardAnswers
    - with_overrides(cfg, **kwargs) -> WizardSettings (non-destructive copies)
- function load_settings(path: str | Path | None) -> WizardSettings  (convenience)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.schemas.labels import DEFAULT_DISTANCE_UNIT, DistanceUnit, POICategory

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

# ----------------------------
# Pydantic models
# ----------------------------


class WizardSettings(BaseModel):
    """Runtime options for talking to the listing service and probing images."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    api_base_url: str = Field("http://localhost:8000/api", description="Listing service base URL.")
    timeout_s: float = Field(15.0, gt=0, le=120, description="HTTP timeout for service calls and image probes.")
    user_agent: str = Field("FlatmateWizard/1.0", description="User-Agent header for outbound requests.")
    probe_images: bool = Field(True, description="Download and decode each image URL before accepting it.")

    @field_validator("api_base_url")
    @classmethod
    def _non_empty_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("api_base_url must be non-empty")
        return v.rstrip("/")


class PointAnswer(BaseModel):
    """One scripted proximity point."""

    model_config = ConfigDict(extra="ignore")

    category: POICategory
    type: str
    distance: str
    name: str = ""

    @field_validator("distance", mode="before")
    @classmethod
    def _distance_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int | float) and not isinstance(v, bool) else v


class WizardAnswers(BaseModel):
    """
    A scripted wizard run.

    Attributes:
        fields:        Form values keyed by ListingFields name (goal, city, rent, ...).
        distance_unit: Unit set on the first proximity step.
        images:        Image URLs, submitted in order on the images step.
        points:        Proximity points, added on their category's step.
    """

    model_config = ConfigDict(extra="ignore")

    fields: dict[str, Any] = Field(default_factory=dict)
    distance_unit: DistanceUnit = DEFAULT_DISTANCE_UNIT
    images: list[str] = Field(default_factory=list)
    points: list[PointAnswer] = Field(default_factory=list)


# ----------------------------
# Loader
# ----------------------------


@dataclass(frozen=True)
class SettingsLoader:
    """
    File-first settings loader with light env overrides.

    Default search (when path=None):
        1) ./config.json
        2) built-in defaults
    """

    env_prefix: str = "FLATMATE_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> WizardSettings:
        if path is None and not Path("config.json").exists():
            return self._apply_env_overrides(WizardSettings())
        p = self._resolve_path(path if path is not None else "config.json")
        raw = self._read_json_file(p)
        cfg = self._parse(WizardSettings, raw)
        return self._apply_env_overrides(cfg)

    def load_json(self, text: str) -> WizardSettings:
        cfg = self._parse(WizardSettings, self._loads(text))
        return self._apply_env_overrides(cfg)

    def load_answers(self, path: str | Path) -> WizardAnswers:
        p = self._resolve_path(path)
        return self._parse(WizardAnswers, self._read_json_file(p))

    def load_answers_json(self, text: str) -> WizardAnswers:
        return self._parse(WizardAnswers, self._loads(text))

    def with_overrides(
        self,
        cfg: WizardSettings,
        *,
        api_base_url: str | None = None,
        timeout_s: float | None = None,
        user_agent: str | None = None,
        probe_images: bool | None = None,
    ) -> WizardSettings:
        """Return a *new* WizardSettings with the non-null overrides applied."""
        updates: dict[str, Any] = {}
        if api_base_url is not None:
            updates["api_base_url"] = api_base_url
        if timeout_s is not None:
            updates["timeout_s"] = timeout_s
        if user_agent is not None:
            updates["user_agent"] = user_agent
        if probe_images is not None:
            updates["probe_images"] = probe_images
        if not updates:
            return cfg
        return self._parse(WizardSettings, {**cfg.model_dump(), **updates})

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Inputs file not found: {p}")
        return p

    def _loads(self, text: str) -> dict[str, Any]:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("Inputs must be a JSON object.")
        return raw

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported inputs format for {p.name}; only .json supported.")
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"Inputs in {p} must be a JSON object.")
        return cast(dict[str, Any], raw)

    def _parse(self, model: type[Any], data: dict[str, Any]) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Inputs validation failed:\n{e}") from e

    def _apply_env_overrides(self, cfg: WizardSettings) -> WizardSettings:
        """
        Apply light, optional overrides from environment variables.
        """
        prefix = self.env_prefix
        updates: dict[str, Any] = {}

        base = os.getenv(f"{prefix}API_BASE_URL")
        if base and base.strip():
            updates["api_base_url"] = base.strip().rstrip("/")

        timeout = os.getenv(f"{prefix}TIMEOUT")
        if timeout:
            try:
                value = float(timeout)
                if 0 < value <= 120:
                    updates["timeout_s"] = value
            except ValueError:
                # Ignore bad value; keep validated cfg.timeout_s
                pass

        ua = os.getenv(f"{prefix}USER_AGENT")
        if ua and ua.strip():
            updates["user_agent"] = ua.strip()

        probe = os.getenv(f"{prefix}PROBE_IMAGES", "").strip().lower()
        if probe in _TRUTHY:
            updates["probe_images"] = True
        elif probe in _FALSY:
            updates["probe_images"] = False

        if not updates:
            return cfg
        return cfg.model_copy(update=updates)


# ----------------------------
# Convenience function
# ----------------------------


def load_settings(path: str | Path | None = None) -> WizardSettings:
    """Convenience wrapper for one-shot callers."""
    return SettingsLoader().load(path)
