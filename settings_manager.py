"""
Settings Manager - Handles heap extractor configuration
"""

import copy
import json
import os
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime


class SettingsManager:
    """Manager for heap extractor settings"""

    DEFAULT_SETTINGS = {
        "application": {
            "version": "1.0.0",
        },
        "scan": {
            "max_read_size": 64 * 1024,                # bytes copied per region
            "max_read_region_size": 1024 * 1024,       # larger regions are listed, not read
            "mapped_region_limit": 10 * 1024 * 1024,   # mapped regions at or above are skipped
            "progress_interval": 100,                  # regions between progress lines
        },
        "text": {
            "min_buffer_size": 16,
            "lookahead_margin": 32,
            "window_size": 20,
            "max_run_bytes": 200,
            "min_text_length": 3,
        },
        "report": {
            "save_to_file": True,
            "output_directory": "",  # Empty means current directory
        },
        "advanced": {
            "verbose": False,
        },
    }

    NUMERIC_SETTINGS = [
        "scan.max_read_size",
        "scan.max_read_region_size",
        "scan.mapped_region_limit",
        "text.min_buffer_size",
        "text.lookahead_margin",
        "text.window_size",
        "text.max_run_bytes",
    ]

    NON_NEGATIVE_SETTINGS = [
        "scan.progress_interval",
        "text.min_text_length",
    ]

    def __init__(self, settings_file: Optional[str] = None):
        """
        Initialize the Settings Manager

        Args:
            settings_file: Path to settings file. If None, uses default location.
        """
        if settings_file is None:
            # Default location: same directory as the script
            settings_file = os.path.join(
                os.path.dirname(os.path.abspath(__file__)),
                "heap_extractor_settings.json"
            )

        self.settings_file = Path(settings_file)
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.load_settings()

    def load_settings(self) -> bool:
        """
        Load settings from file

        Returns:
            True if loaded successfully, False otherwise
        """
        if not self.settings_file.exists():
            # Create default settings file
            self.save_settings()
            return True

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                loaded_settings = json.load(f)

            loaded_settings.pop('_metadata', None)

            # Merge with defaults to ensure all keys exist
            self.settings = self._merge_settings(self.DEFAULT_SETTINGS, loaded_settings)
            return True
        except (OSError, ValueError) as e:
            print(f"Error loading settings: {e}")
            return False

    def save_settings(self) -> bool:
        """
        Save current settings to file

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            settings_with_meta = {
                "_metadata": {
                    "last_modified": datetime.now().isoformat(),
                    "version": self.settings["application"]["version"]
                },
                **self.settings
            }

            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(settings_with_meta, f, indent=2)
            return True
        except OSError as e:
            print(f"Error saving settings: {e}")
            return False

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a setting value using dot notation

        Args:
            key_path: Path to setting using dots (e.g., "scan.max_read_size")
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        keys = key_path.split('.')
        value = self.settings

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key_path: str, value: Any) -> bool:
        """
        Set a setting value using dot notation

        Returns:
            True if set successfully, False otherwise
        """
        keys = key_path.split('.')
        settings = self.settings

        try:
            for key in keys[:-1]:
                if key not in settings:
                    settings[key] = {}
                settings = settings[key]

            settings[keys[-1]] = value
            return True
        except TypeError as e:
            print(f"Error setting value: {e}")
            return False

    def reset_section(self, section: str) -> bool:
        """Reset a specific section (e.g., "scan") to default values"""
        if section in self.DEFAULT_SETTINGS:
            self.settings[section] = copy.deepcopy(self.DEFAULT_SETTINGS[section])
            return self.save_settings()
        return False

    def validate(self) -> List[str]:
        """
        Check the numeric scan limits

        Returns:
            List of problems, empty when the settings are usable
        """
        problems = []
        for key_path in self.NUMERIC_SETTINGS:
            value = self.get(key_path)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                problems.append(f"{key_path} must be a positive integer (got {value!r})")

        # 0 is allowed: no minimum length / no progress lines
        for key_path in self.NON_NEGATIVE_SETTINGS:
            value = self.get(key_path)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                problems.append(f"{key_path} must be a non-negative integer (got {value!r})")

        return problems

    def _merge_settings(self, defaults: Dict, loaded: Dict) -> Dict:
        """
        Recursively merge loaded settings with defaults

        Args:
            defaults: Default settings dictionary
            loaded: Loaded settings dictionary

        Returns:
            Merged dictionary
        """
        result = copy.deepcopy(defaults)

        for key, value in loaded.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_settings(result[key], value)
            else:
                result[key] = value

        return result
