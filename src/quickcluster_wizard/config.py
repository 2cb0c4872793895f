"""Settings management for quickcluster-wizard.

Settings control policy decisions of the engine that deployments may want
to tune:

- how malformed parameter conditions evaluate
- the reservation length used when the user did not pick one

Settings are stored in ~/.qcw/settings.json
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ValidationError
from rich.console import Console

from quickcluster_wizard.constants import DEFAULT_RESERVATION_DAYS
from quickcluster_wizard.types import MalformedConditionPolicy

console = Console(stderr=True)

SETTINGS_VERSION = "1.0"


class WizardSettings(BaseModel):
    """Tunable engine settings.

    Attributes:
        malformed_condition_policy: Result of a condition leaf that has no
            operator. Defaults to FAIL so an authoring mistake blocks the
            request instead of letting it bypass the check.
        default_reservation_days: Reservation length applied when no
            expiration was submitted.
    """

    malformed_condition_policy: MalformedConditionPolicy = MalformedConditionPolicy.FAIL
    default_reservation_days: int = DEFAULT_RESERVATION_DAYS


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.qcw directory.
    """
    return Path.home() / ".qcw"


def get_settings_path(config_dir: Path | None = None) -> Path:
    """Get the path to the settings file.

    Args:
        config_dir: Directory to use instead of ~/.qcw.

    Returns:
        Path to the settings.json file.
    """
    return (config_dir or get_config_dir()) / "settings.json"


def load_settings(config_dir: Path | None = None) -> WizardSettings:
    """Load settings from disk.

    Returns:
        Stored settings, or the defaults if the file is missing, corrupted,
        written by an incompatible version or fails validation.
    """
    settings_path = get_settings_path(config_dir)

    if not settings_path.exists():
        return WizardSettings()

    try:
        with open(settings_path, "r") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            console.print(
                "[yellow]Warning: Invalid settings format, using defaults[/yellow]",
                highlight=False,
            )
            return WizardSettings()

        version = data.pop("version", SETTINGS_VERSION)
        if version != SETTINGS_VERSION:
            console.print(
                f"[yellow]Warning: Settings version {version} not supported, "
                f"using defaults[/yellow]",
                highlight=False,
            )
            return WizardSettings()

        return WizardSettings(**data)

    except (json.JSONDecodeError, OSError, ValidationError) as e:
        console.print(
            f"[yellow]Warning: Could not load settings: {e}[/yellow]",
            highlight=False,
        )
        return WizardSettings()


def save_settings(settings: WizardSettings, config_dir: Path | None = None) -> bool:
    """Save settings to disk.

    Returns:
        True if the file was written.
    """
    settings_path = get_settings_path(config_dir)

    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.print(
            f"[yellow]Warning: Could not create config directory: {e}[/yellow]",
            highlight=False,
        )
        return False

    data = {"version": SETTINGS_VERSION, **settings.model_dump(mode="json")}
    try:
        with open(settings_path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        console.print(
            f"[yellow]Warning: Could not save settings: {e}[/yellow]",
            highlight=False,
        )
        return False
    return True


def clear_settings(config_dir: Path | None = None) -> None:
    """Remove saved settings so the defaults apply again."""
    settings_path = get_settings_path(config_dir)
    if settings_path.exists():
        try:
            settings_path.unlink()
        except OSError as e:
            console.print(
                f"[yellow]Warning: Could not clear settings: {e}[/yellow]",
                highlight=False,
            )
