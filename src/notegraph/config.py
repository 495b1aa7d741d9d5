"""
Configuration & Path Management
===============================
Central registry for file paths and tunable settings.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths scattered throughout the code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets when the app is frozen into an executable.
3. Tuning: Layout, seeding and camera parameters can be overridden from a
   JSON settings file without touching code.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    SAMPLE_NOTES_PATH (str): Absolute path to the bundled sample notes.
    ViewSettings: Bundle of LayoutSettings, SeedSettings and CameraSettings.
    load_settings: Reads a ViewSettings from JSON.
"""
import json
import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Type, TypeVar

from notegraph.model.builder import SeedSettings
from notegraph.model.layout import LayoutSettings
from notegraph.view.camera import CameraSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # config.py is in src/notegraph/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


ASSETS_PATH: str = get_resource_path("assets")
SAMPLE_NOTES_PATH: str = os.path.join(ASSETS_PATH, "sample_notes.json")


@dataclass
class ViewSettings:
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    seed: SeedSettings = field(default_factory=SeedSettings)
    camera: CameraSettings = field(default_factory=CameraSettings)


def _matches_default_type(value: Any, default: Any) -> bool:
    """JSON value check against the field default: numbers for floats, whole numbers for ints."""
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if isinstance(default, int):
        return isinstance(value, int)
    if isinstance(default, float):
        return isinstance(value, (int, float))
    if default is None:
        # None defaults are optional thresholds (freeze_energy)
        return value is None or isinstance(value, (int, float))
    return True


def _section(cls: Type[T], data: Any, name: str) -> T:
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValueError(f"Settings section '{name}' must be an object.")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in settings section '{name}': {', '.join(unknown)}")
    for f in fields(cls):
        if f.name in data and not _matches_default_type(data[f.name], f.default):
            raise ValueError(
                f"Invalid value in settings section '{name}': "
                f"{f.name}={data[f.name]!r} ({type(data[f.name]).__name__})"
            )
    try:
        return cls(**data)
    except TypeError as e:
        # wrong value types surface as TypeError from __post_init__ comparisons
        raise ValueError(f"Invalid value in settings section '{name}': {e}") from e


def load_settings(path: Optional[str] = None) -> ViewSettings:
    """
    Load view settings from a JSON file.

    The file may contain "layout", "seed" and "camera" objects; omitted
    sections and keys keep their defaults. The seed circle follows the layout
    center unless "seed" sets its own.

    Raises:
        ValueError: On unknown sections/keys or invalid values.
        OSError: If the file cannot be read.
    """
    if path is None:
        return ViewSettings()

    logger.info(f"Loading settings from: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Settings file must contain a JSON object.")
    unknown = sorted(set(data) - {"layout", "seed", "camera"})
    if unknown:
        raise ValueError(f"Unknown settings sections: {', '.join(unknown)}")

    layout = _section(LayoutSettings, data.get("layout"), "layout")
    seed_raw = data.get("seed")
    if seed_raw is not None and not isinstance(seed_raw, dict):
        raise ValueError("Settings section 'seed' must be an object.")
    seed_data = dict(seed_raw or {})
    seed_data.setdefault("center_x", layout.center_x)
    seed_data.setdefault("center_y", layout.center_y)
    seed = _section(SeedSettings, seed_data, "seed")
    camera = _section(CameraSettings, data.get("camera"), "camera")
    return ViewSettings(layout=layout, seed=seed, camera=camera)


if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")
