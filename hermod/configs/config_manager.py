from __future__ import annotations
import json, re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from aws_cdk import Stack
from hermod.configs.error_handler import ErrorHandler
from hermod.configs.stages import APP_NAME, Stage

_VAR = re.compile(r"\$\{([A-Za-z0-9_]+)\}")

# Keys whose list values accumulate across merged files instead of being replaced
ACCUMULATING_KEYS = ("dynamodb_access", "s3_access")


class ConfigManager:
    """
    Centralized configuration management for the Hermod CDK project.

    Handles:
    - Path resolution for different config types (tables, buckets, lambdas, APIs, ...)
    - JSON file loading with ${Var} placeholder expansion
    - Default file merging
    - Directory scanning for config files
    """

    # Root config directory, shipped inside the package
    CONFIG_ROOT = Path(__file__).resolve().parent

    # Config type mappings to subdirectories
    CONFIG_PATHS = {
        "tables": "tables",
        "buckets": "buckets",
        "lambdas": "lambdas",
        "rest_apis": "apis/rest",
        "schedules": "schedules",
    }

    def __init__(self, stack: Stack, stage: Stage):
        self.stack = stack
        self.stage = stage
        self.vars = self.stage_vars(stack, stage)

    @staticmethod
    def stage_vars(stack: Stack, stage: Stage, extra: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
        """
        Generate placeholder variables for JSON configuration expansion.

        Args:
            stack: CDK stack instance
            stage: Deployment stage
            extra: Additional variables to include

        Returns:
            Dictionary of variable name to value mappings
        """
        base = {
            "AppName": APP_NAME,
            "Stage": stage.value,
            "AccountId": stack.account,
            "Region": stack.region,
            "Partition": stack.partition,
        }
        if extra:
            base.update({k: str(v) for k, v in extra.items()})
        return base

    def get_config_path(self, config_type: str, filename: Optional[str] = None) -> Path:
        """
        Get the full path to a config file.

        Args:
            config_type: Type of config (tables, buckets, lambdas, ...)
            filename: Optional filename, if None returns the directory path

        Returns:
            Full path to the config file or directory
        """
        ErrorHandler.validate_enum_value(config_type, list(self.CONFIG_PATHS), "config_type", "ConfigManager")

        base_path = self.CONFIG_ROOT / self.CONFIG_PATHS[config_type]
        if filename:
            return base_path / filename
        return base_path

    def expand_placeholders(self, obj: Any, vars: Optional[Mapping[str, str]] = None) -> Any:
        """
        Recursively expand ${VAR} placeholders in strings, lists, and dicts.

        Unknown placeholders are left untouched.

        Args:
            obj: Object to expand placeholders in
            vars: Variables to substitute (uses stage vars if None)

        Returns:
            Object with placeholders expanded
        """
        if vars is None:
            vars = self.vars

        if isinstance(obj, str):
            return _VAR.sub(lambda m: str(vars.get(m.group(1), m.group(0))), obj)
        if isinstance(obj, list):
            return [self.expand_placeholders(x, vars) for x in obj]
        if isinstance(obj, dict):
            return {k: self.expand_placeholders(v, vars) for k, v in obj.items()}
        return obj

    def load_json(self, filepath: Path, expand_vars: bool = True) -> dict:
        """
        Load and parse a JSON file, optionally expanding placeholders.

        Args:
            filepath: Path to the JSON file
            expand_vars: Whether to expand placeholders in the loaded JSON

        Returns:
            Parsed JSON as dict
        """
        ErrorHandler.validate_file_exists(filepath, "Config file")

        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        if expand_vars:
            data = self.expand_placeholders(data)

        return data

    def load_config(self, config_type: str, filename: str, expand_vars: bool = True) -> dict:
        """
        Load a config file by type and filename.

        Args:
            config_type: Type of config
            filename: Name of the config file
            expand_vars: Whether to expand placeholders

        Returns:
            Parsed JSON config
        """
        return self.load_json(self.get_config_path(config_type, filename), expand_vars)

    def list_config_files(self, config_type: str, exclude: Optional[set[str]] = None) -> List[Path]:
        """
        List all JSON files in a config directory.

        Args:
            config_type: Type of config directory
            exclude: Set of filenames to exclude

        Returns:
            Sorted list of file paths
        """
        config_dir = self.get_config_path(config_type)
        ErrorHandler.validate_path_exists(config_dir, "Config directory")

        files = sorted(config_dir.glob("*.json"))
        if exclude:
            files = [f for f in files if f.name not in exclude]
        return files

    @staticmethod
    def merge_with_defaults(defaults: dict, conf: dict) -> dict:
        """
        Merge a config over its defaults.

        Scalars and dicts in conf override defaults; lists under
        ACCUMULATING_KEYS are concatenated, defaults first.

        Args:
            defaults: Defaults dict
            conf: Specific config dict

        Returns:
            Merged config dict
        """
        merged = {**defaults, **conf}
        for key in ACCUMULATING_KEYS:
            if key in defaults and key in conf:
                merged[key] = list(defaults[key]) + list(conf[key])
        return merged

    def load_configs_with_defaults(
            self,
            config_type: str,
            defaults_file: Optional[str] = None
        ) -> List[Tuple[Path, dict]]:
        """
        Load every config of a type, each merged over an optional defaults file.

        Args:
            config_type: Type of config directory
            defaults_file: Optional defaults filename in the same directory

        Returns:
            List of tuples (filepath, config_dict)
        """
        defaults: dict = {}
        if defaults_file:
            defaults = self.load_config(config_type, defaults_file) or {}

        exclude = {defaults_file} if defaults_file else set()
        configs = []
        for filepath in self.list_config_files(config_type, exclude=exclude):
            conf = self.merge_with_defaults(defaults, self.load_json(filepath))
            conf.setdefault("name", filepath.stem)
            configs.append((filepath, conf))

        ErrorHandler.validate_configs_found(configs, config_type)
        return configs

    def find_api_dirs(self, config_type: str = "rest_apis") -> List[Path]:
        """
        Find all API directories holding an api.json and a routes/ folder.

        Returns:
            List of Path objects for API directories
        """
        apis_dir = self.get_config_path(config_type)
        ErrorHandler.validate_path_exists(apis_dir, "APIs directory")

        return [
            d for d in sorted(p for p in apis_dir.iterdir() if p.is_dir())
            if (d / "api.json").is_file() and (d / "routes").is_dir()
        ]

    def find_route_files(self, api_dir: Path) -> List[Path]:
        """
        Find all route JSON files for an API.

        Args:
            api_dir: API directory returned by find_api_dirs

        Returns:
            Sorted list of route file paths
        """
        routes_dir = api_dir / "routes"
        ErrorHandler.validate_path_exists(routes_dir, "Routes directory")
        return sorted(routes_dir.glob("**/*.json"))
