"""Configuration system for the autoui CLI with proper precedence handling.

Sources, highest precedence first:
CLI flags > environment variables > config files > defaults
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..audit.capture.browser_factory import BrowserEngineType
from ..audit.capture.viewports import VIEWPORT_PROFILES, parse_viewport_list
from ..audit.errors import ConfigurationError
from ..audit.models.crawl import CrawlConfig, ExplorerConfig
from ..audit.probes.accessibility import DEFAULT_AXE_SCRIPT_URL


REPORT_FORMATS = ("json", "html")


class BrowserSection(BaseModel):
    """Browser and viewport options."""
    engine: str = Field(default=BrowserEngineType.CHROMIUM, description="Browser engine")
    headless: bool = Field(default=True, description="Run browser without GUI")
    viewports: List[str] = Field(default_factory=lambda: ["desktop"], description="Viewport profiles to crawl")
    parallel_viewports: bool = Field(default=False, description="Crawl viewports concurrently")
    axe_script_url: str = Field(default=DEFAULT_AXE_SCRIPT_URL, description="axe-core script injected for accessibility scans")
    slow_mo: int = Field(default=0, ge=0, description="Delay in ms added to every browser operation")
    user_agent: Optional[str] = Field(default=None, description="User-Agent overriding the device one")
    locale: Optional[str] = Field(default=None, description="Browser context locale, e.g. en-US")
    extra_headers: Dict[str, str] = Field(default_factory=dict, description="Extra HTTP headers sent with every request")

    @field_validator('engine')
    @classmethod
    def validate_engine(cls, v):
        engines = (BrowserEngineType.CHROMIUM, BrowserEngineType.FIREFOX, BrowserEngineType.WEBKIT)
        if v not in engines:
            raise ValueError(f"engine must be one of: {', '.join(engines)}")
        return v

    @field_validator('viewports', mode='before')
    @classmethod
    def split_viewports(cls, v):
        if isinstance(v, str):
            return parse_viewport_list(v)
        return [name.strip().lower() for name in v]


class OutputSection(BaseModel):
    """Report output options."""
    output_dir: Path = Field(default=Path("reports"), description="Report directory")
    formats: List[str] = Field(default_factory=lambda: list(REPORT_FORMATS), description="Report formats to write")
    verbose: bool = Field(default=False, description="Verbose output")
    quiet: bool = Field(default=False, description="Quiet mode")

    @field_validator('formats', mode='before')
    @classmethod
    def validate_formats(cls, v):
        if isinstance(v, str):
            v = [part.strip() for part in v.split(",") if part.strip()]
        v = [fmt.lower() for fmt in v]
        for fmt in v:
            if fmt not in REPORT_FORMATS:
                raise ValueError(f"formats must be drawn from: {', '.join(REPORT_FORMATS)}")
        return v


class GateSection(BaseModel):
    """Quality gate thresholds."""
    enabled: bool = Field(default=True, description="Exit non-zero when thresholds are breached")
    max_critical_accessibility_issues: int = Field(default=0, ge=0, description="Tolerated critical accessibility violations")
    max_broken_links: int = Field(default=5, ge=0, description="Tolerated broken links")


class CLIConfiguration(BaseModel):
    """Complete CLI configuration with all sections."""

    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    explorer: ExplorerConfig = Field(default_factory=ExplorerConfig)
    browser: BrowserSection = Field(default_factory=BrowserSection)
    output: OutputSection = Field(default_factory=OutputSection)
    gate: GateSection = Field(default_factory=GateSection)

    # Metadata
    config_file_path: Optional[Path] = Field(default=None, description="Source config file")
    loaded_from: List[str] = Field(default_factory=list, description="Configuration sources")


class ConfigurationLoader:
    """Loads and merges configuration from multiple sources with proper precedence."""

    # Environment variable prefix
    ENV_PREFIX = "AUTOUI_"

    # Default configuration file names (searched in order)
    DEFAULT_CONFIG_FILES = [
        "autoui.yaml",
        "autoui.yml",
        ".autoui.yaml",
        ".autoui.yml",
        "autoui.json",
        ".autoui.json"
    ]

    BOOLEAN_KEYS = ('.headless', '.parallel_viewports', '.verbose', '.quiet', '.enabled')
    INTEGER_KEYS = ('.max_depth', '.max_links_per_page', '.navigation_timeout_ms', '.slow_mo',
                    '.max_critical_accessibility_issues', '.max_broken_links')
    FLOAT_KEYS = ('.page_deadline_seconds',)

    def __init__(self):
        self.loaded_sources: List[str] = []

    def load_configuration(
        self,
        config_file: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        search_paths: Optional[List[Path]] = None
    ) -> CLIConfiguration:
        """Load configuration with proper precedence.

        Precedence (highest to lowest):
        1. CLI overrides (flags)
        2. Environment variables
        3. Specified config file
        4. Auto-discovered config files
        5. Defaults

        Args:
            config_file: Explicitly specified config file
            cli_overrides: CLI flag overrides
            search_paths: Paths to search for config files

        Returns:
            Merged configuration

        Raises:
            ConfigurationError: If a source cannot be read or values are invalid
        """
        self.loaded_sources = ["defaults"]
        config_data: Dict[str, Any] = {}

        if not config_file:
            discovered_config = self._discover_config_file(search_paths or [Path.cwd()])
            if discovered_config:
                source = discovered_config.pop("_source_file")
                config_data = self._merge_config(config_data, discovered_config)
                self.loaded_sources.append(f"auto-discovered: {source}")

        if config_file:
            if not config_file.exists():
                raise ConfigurationError(f"Configuration file not found: {config_file}")

            file_config = self._load_config_file(config_file)
            config_data = self._merge_config(config_data, file_config)
            self.loaded_sources.append(f"config file: {config_file}")

        env_config = self._load_environment_variables()
        if env_config:
            config_data = self._merge_config(config_data, env_config)
            self.loaded_sources.append("environment variables")

        if cli_overrides:
            config_data = self._merge_config(config_data, cli_overrides)
            self.loaded_sources.append("CLI flags")

        config_data["loaded_from"] = self.loaded_sources
        if config_file:
            config_data["config_file_path"] = config_file

        try:
            return CLIConfiguration(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _discover_config_file(self, search_paths: List[Path]) -> Optional[Dict[str, Any]]:
        """Discover configuration file in search paths."""
        for search_path in search_paths:
            for config_filename in self.DEFAULT_CONFIG_FILES:
                config_path = search_path / config_filename
                if config_path.exists() and config_path.is_file():
                    config_data = self._load_config_file(config_path)
                    config_data["_source_file"] = str(config_path)
                    return config_data
        return None

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        suffix = config_path.suffix.lower()
        if suffix not in ('.yaml', '.yml', '.json'):
            raise ConfigurationError(f"Unsupported config file format: {config_path.suffix}")

        try:
            content = config_path.read_text(encoding='utf-8')
            if suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file {config_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading config file {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        return data

    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        env_mapping = {
            f"{self.ENV_PREFIX}MAX_DEPTH": "crawl.max_depth",
            f"{self.ENV_PREFIX}MAX_LINKS": "crawl.max_links_per_page",
            f"{self.ENV_PREFIX}PAGE_DEADLINE": "crawl.page_deadline_seconds",
            f"{self.ENV_PREFIX}NAVIGATION_TIMEOUT": "crawl.navigation_timeout_ms",
            f"{self.ENV_PREFIX}ENGINE": "browser.engine",
            f"{self.ENV_PREFIX}HEADLESS": "browser.headless",
            f"{self.ENV_PREFIX}VIEWPORTS": "browser.viewports",
            f"{self.ENV_PREFIX}PARALLEL_VIEWPORTS": "browser.parallel_viewports",
            f"{self.ENV_PREFIX}AXE_SCRIPT_URL": "browser.axe_script_url",
            f"{self.ENV_PREFIX}SLOW_MO": "browser.slow_mo",
            f"{self.ENV_PREFIX}USER_AGENT": "browser.user_agent",
            f"{self.ENV_PREFIX}LOCALE": "browser.locale",
            f"{self.ENV_PREFIX}OUTPUT_DIR": "output.output_dir",
            f"{self.ENV_PREFIX}FORMATS": "output.formats",
            f"{self.ENV_PREFIX}VERBOSE": "output.verbose",
            f"{self.ENV_PREFIX}QUIET": "output.quiet",
            f"{self.ENV_PREFIX}GATE": "gate.enabled",
            f"{self.ENV_PREFIX}MAX_CRITICAL_A11Y": "gate.max_critical_accessibility_issues",
            f"{self.ENV_PREFIX}MAX_BROKEN_LINKS": "gate.max_broken_links",
        }

        for env_var, config_path in env_mapping.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                converted_value = self._convert_env_value(env_value, config_path)
                self._set_nested_value(config, config_path, converted_value)

        return config

    def _convert_env_value(self, value: str, config_path: str) -> Any:
        """Convert environment variable string to appropriate type."""
        if config_path.endswith(self.BOOLEAN_KEYS):
            return value.lower() in ('true', '1', 'yes', 'on')

        try:
            if config_path.endswith(self.INTEGER_KEYS):
                return int(value)
            if config_path.endswith(self.FLOAT_KEYS):
                return float(value)
        except ValueError:
            raise ConfigurationError(f"Invalid numeric value '{value}' for {config_path}")

        if config_path.endswith('.output_dir'):
            return Path(value)

        return value

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any):
        """Set a nested configuration value using dot notation."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge configuration dictionaries, with override taking precedence."""
        if not override:
            return base

        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result


def load_configuration(
    config_file: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    search_paths: Optional[List[Path]] = None
) -> CLIConfiguration:
    """Convenience function to load configuration."""
    loader = ConfigurationLoader()
    return loader.load_configuration(config_file, cli_overrides, search_paths)


def print_configuration(config: CLIConfiguration, format: str = "yaml") -> str:
    """Render the effective configuration for debugging.

    Args:
        config: Configuration to print
        format: Output format (yaml, json)
    """
    config_dict = config.model_dump(
        mode="json",
        exclude={'loaded_from', 'config_file_path'},
    )

    if format.lower() == "json":
        return json.dumps(config_dict, indent=2, default=str)
    return yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=True)


def validate_configuration(config: CLIConfiguration) -> List[str]:
    """Return a list of validation error messages (empty if valid).

    Unknown viewport names are not errors; they are skipped at run time.
    """
    errors = []

    if config.output.verbose and config.output.quiet:
        errors.append("--verbose and --quiet are mutually exclusive")

    if not config.browser.viewports:
        errors.append(f"No viewports requested. Available: {', '.join(VIEWPORT_PROFILES)}")

    try:
        config.output.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        errors.append(f"Cannot create output directory {config.output.output_dir}: {e}")

    return errors
