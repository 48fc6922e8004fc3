"""Configuration management for mzguard."""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from mzguard.analysis.classifier import DEFAULT_WARNING_THRESHOLD

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = Path.home() / ".mzguard" / "config.yaml"
PROJECT_CONFIG_NAME = ".mzguard.yaml"

DEFAULTS: dict[str, Any] = {
    "warning_threshold": DEFAULT_WARNING_THRESHOLD,
    "popularity_file": None,
    "max_workers": None,
    "include_disabled": False,
    "skip_prefix": "_",
    "output_format": "markdown",
    "fail_on": "never",
    "verbose": False,
}

CHOICES: dict[str, tuple[str, ...]] = {
    "output_format": ("markdown", "json", "table"),
    "fail_on": ("never", "info", "warning"),
}


class Config:
    """Settings resolved from CLI args > project .mzguard.yaml > user config > defaults."""

    def __init__(self):
        self.warning_threshold: float = DEFAULTS["warning_threshold"]
        self.popularity_file: Optional[str] = None
        self.max_workers: Optional[int] = None
        self.include_disabled: bool = False
        self.skip_prefix: str = DEFAULTS["skip_prefix"]
        self.output_format: str = DEFAULTS["output_format"]
        self.fail_on: str = DEFAULTS["fail_on"]
        self.verbose: bool = False

    @classmethod
    def load(
        cls,
        cli_args: Optional[dict[str, Any]] = None,
        project_dir: Optional[Path] = None,
        user_config_path: Optional[Path] = None,
    ) -> "Config":
        """
        Resolve settings from every layer.

        Args:
            cli_args: Values given on the command line (None values are ignored)
            project_dir: Directory holding .mzguard.yaml (default: current directory)
            user_config_path: User config file (default: ~/.mzguard/config.yaml)

        Returns:
            Config instance with loaded values
        """
        config = cls()

        for path in (
            user_config_path or USER_CONFIG_PATH,
            (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME,
        ):
            if path.exists():
                config.load_file(path)

        if cli_args:
            config.update(cli_args, source="command line")
        return config

    def update(self, values: Mapping[str, Any], source: str) -> None:
        """Apply known, non-None settings; invalid choices are logged and skipped."""
        for key, value in values.items():
            if key not in DEFAULTS:
                logger.debug(f"Ignoring unknown setting '{key}' from {source}")
                continue
            if value is None:
                continue
            if key in CHOICES and value not in CHOICES[key]:
                logger.warning(
                    f"Ignoring {key}={value!r} from {source} (expected one of {', '.join(CHOICES[key])})"
                )
                continue
            setattr(self, key, value)

    def load_file(self, config_path: Path) -> None:
        """Apply values from a YAML or JSON file; unreadable files are logged and skipped."""
        try:
            content = config_path.read_text(encoding="utf-8")
            if config_path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content)
            elif config_path.suffix == ".json":
                data = json.loads(content)
            else:
                logger.warning(f"Ignoring config file with unknown format: {config_path}")
                return
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config {config_path}: {e}")
            return

        if isinstance(data, dict):
            self.update(data, source=str(config_path))
        elif data is not None:
            logger.warning(f"Ignoring config {config_path}: expected a mapping")

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, key) for key in DEFAULTS}

    def save(self, path: Path, format: str = "yaml") -> None:
        """
        Write the settings that have a value.

        Args:
            path: Destination file (parent directories are created)
            format: 'yaml' or 'json'
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {k: v for k, v in self.to_dict().items() if v is not None}

        if format == "yaml":
            text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        else:
            text = json.dumps(data, indent=2)
        path.write_text(text, encoding="utf-8")
