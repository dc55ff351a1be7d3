"""
Centralized error handling for the Hermod CDK project.

This module defines the single error type raised for bad configuration and
the validation helpers shared by the environment resolvers and the JSON
driven builders.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from functools import wraps


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or malformed."""


class ErrorHandler:
    """
    Centralized error handling for the Hermod CDK project.

    Provides utility methods for common validation scenarios.
    """

    @staticmethod
    def require_env(
            environ: Mapping[str, str],
            name: str,
            message: Optional[str] = None
        ) -> str:
        """
        Return an environment variable that must be present and non-empty.

        Args:
            environ: Environment mapping to read from
            name: Variable name
            message: Error message, defaults to "<name> environment variable is required"

        Returns:
            The variable's value

        Raises:
            ConfigurationError: If the variable is unset or empty
        """
        value = environ.get(name)
        if value is None or value == "":
            raise ConfigurationError(message or f"{name} environment variable is required")
        return value

    @staticmethod
    def validate_path_exists(
            path: Union[str, Path],
            path_type: str = "Path"
        ) -> None:
        """
        Validate that a path exists and is a directory.

        Args:
            path: Path to validate
            path_type: Type description for error messages

        Raises:
            FileNotFoundError: If path does not exist or is not a directory
        """
        if not Path(path).is_dir():
            raise FileNotFoundError(f"{path_type} not found: {path}")

    @staticmethod
    def validate_file_exists(
            file_path: Union[str, Path],
            file_type: str = "File"
        ) -> None:
        """
        Validate that a file exists.

        Args:
            file_path: File path to validate
            file_type: Type description for error messages

        Raises:
            FileNotFoundError: If file does not exist
        """
        if not Path(file_path).is_file():
            raise FileNotFoundError(f"{file_type} not found: {file_path}")

    @staticmethod
    def validate_required_fields(
            data: Dict[str, Any],
            required_fields: List[str],
            context: str = "Configuration"
        ) -> None:
        """
        Validate that all required fields are present in a dictionary.

        Args:
            data: Dictionary to validate
            required_fields: List of field names that must be present
            context: Context description for error messages

        Raises:
            ConfigurationError: If any required fields are missing
        """
        missing_fields = [field for field in required_fields if field not in data]
        if missing_fields:
            raise ConfigurationError(f"{context} missing required fields: {', '.join(missing_fields)}")

    @staticmethod
    def validate_field_structure(
            data: Dict[str, Any],
            field_name: str,
            required_subfields: List[str],
            context: str = "Configuration"
        ) -> None:
        """
        Validate that a field has the required subfields.

        Args:
            data: Dictionary containing the field to validate
            field_name: Name of the field to validate
            required_subfields: List of subfield names that must be present
            context: Context description for error messages

        Raises:
            ConfigurationError: If field is missing or lacks required subfields
        """
        if field_name not in data:
            raise ConfigurationError(f"{context} missing required field '{field_name}'")

        field_data = data[field_name]
        if not isinstance(field_data, dict):
            raise ConfigurationError(f"{context} field '{field_name}' must be a dictionary")

        missing_subfields = [subfield for subfield in required_subfields if subfield not in field_data]
        if missing_subfields:
            raise ConfigurationError(
                f"{context} field '{field_name}' missing required subfields: {', '.join(missing_subfields)}"
            )

    @staticmethod
    def validate_enum_value(
            value: Any,
            valid_values: List[Any],
            field_name: str,
            context: str = "Configuration"
        ) -> None:
        """
        Validate that a value is one of the allowed enum values.

        Args:
            value: Value to validate
            valid_values: List of allowed values
            field_name: Name of the field being validated
            context: Context description for error messages

        Raises:
            ConfigurationError: If value is not in the allowed list
        """
        if value not in valid_values:
            raise ConfigurationError(
                f"{context} field '{field_name}' must be one of: {', '.join(map(str, valid_values))}"
            )

    @staticmethod
    def validate_type(
            value: Any,
            expected_type: Union[type, tuple],
            field_name: str,
            context: str = "Configuration"
        ) -> None:
        """
        Validate that a value is of the expected type.

        Args:
            value: Value to validate
            expected_type: Expected type class, or a tuple of them
            field_name: Name of the field being validated
            context: Context description for error messages

        Raises:
            TypeError: If value is not of the expected type
        """
        if not isinstance(value, expected_type):
            expected = (
                " or ".join(t.__name__ for t in expected_type)
                if isinstance(expected_type, tuple)
                else expected_type.__name__
            )
            raise TypeError(f"{context} field '{field_name}' must be of type {expected}, got {type(value).__name__}")

    @staticmethod
    def validate_reference(
            name: str,
            container: Mapping[str, Any],
            kind: str,
            context: str = "Configuration"
        ) -> None:
        """
        Validate that a logical name refers to an already built resource.

        Args:
            name: Logical name being referenced
            container: Mapping of logical name to built resource
            kind: Resource kind for error messages (lambda, table, bucket)
            context: Context description for error messages

        Raises:
            KeyError: If the name is not in the container
        """
        if name not in container:
            raise KeyError(f"{context} {kind} '{name}' not found in {kind}s map")

    @staticmethod
    def validate_configs_found(
            configs: List[Any],
            context: str = "Configuration"
        ) -> None:
        """
        Validate that configurations were found.

        Args:
            configs: List of configurations to validate
            context: Context description for error messages

        Raises:
            ConfigurationError: If no configurations were found
        """
        if not configs:
            raise ConfigurationError(f"No {context} configurations found")


class ValidationDecorators:
    """
    Decorators for common validation patterns.
    """

    @staticmethod
    def validate_required_config_fields(
            required_fields: List[str],
            config_param: str = "conf",
            context: str = "Configuration"
        ):
        """
        Decorator to validate that a configuration dictionary has all required fields.

        The decorated function must take (scope, logical_name, conf, ...) or
        pass the config by keyword.

        Args:
            required_fields: List of required field names
            config_param: Name of the config parameter to validate
            context: Context description for error messages

        Returns:
            Decorator function
        """
        def decorator(func: Callable) -> Callable:
            @wraps(func)
            def wrapper(*args, **kwargs):
                if config_param in kwargs:
                    config_value = kwargs[config_param]
                elif len(args) > 2:  # Skip scope and logical_name
                    config_value = args[2]
                else:
                    raise ValueError(f"Config parameter '{config_param}' not found in function arguments")

                ErrorHandler.validate_required_fields(config_value, required_fields, context)
                return func(*args, **kwargs)
            return wrapper
        return decorator
