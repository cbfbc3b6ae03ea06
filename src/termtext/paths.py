from pathlib import Path

import platformdirs


def get_config() -> Path:
    """Get the configuration directory, creating it if necessary.

    Returns:
        Path to the directory.
    """
    path = Path(platformdirs.user_config_dir("termtext", ensure_exists=True))
    return path


def get_settings_path() -> Path:
    """Get the path to the settings file."""
    return get_config() / "settings.json"
