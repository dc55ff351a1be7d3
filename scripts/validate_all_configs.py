#!/usr/bin/env python3
"""
JSON schema validation for all Hermod configuration files.

This script validates every JSON configuration file under hermod/configs/
against its schema in schema/. It's designed to be used as a pre-commit
hook to ensure all configurations are valid.
"""

import json
import sys
from pathlib import Path

from jsonschema import Draft202012Validator

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Schema to config file glob mappings, relative to the project root
SCHEMA_MAPPINGS = {
    "schema/table.schema.json": ["hermod/configs/tables/*.json"],
    "schema/bucket.schema.json": ["hermod/configs/buckets/*.json"],
    "schema/lambda.defaults.schema.json": ["hermod/configs/lambdas/lambda.defaults.json"],
    "schema/lambda.schema.json": ["hermod/configs/lambdas/*.json"],
    "schema/schedule.schema.json": ["hermod/configs/schedules/*.json"],
    "schema/rest_api.schema.json": ["hermod/configs/apis/rest/*/api.json"],
    "schema/rest_route.schema.json": ["hermod/configs/apis/rest/*/routes/*.json"],
}


def load_json(path: Path) -> dict:
    """Load and parse a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to load {path}: {e}") from e


def resolve_config_files(patterns: list[str], root: Path = PROJECT_ROOT) -> list[Path]:
    """
    Expand glob patterns into a sorted list of config files.

    Wildcards never match *.defaults.json; defaults files have their own schema.
    """
    files: list[Path] = []
    for pattern in patterns:
        matches = sorted(root.glob(pattern))
        if "*" in pattern:
            matches = [m for m in matches if not m.name.endswith(".defaults.json")]
        files.extend(matches)
    return files


def collect_errors(schema_path: Path, config_file: Path) -> list[str]:
    """
    Validate one config file against a schema.

    Returns:
        Human readable error lines, empty when the file is valid
    """
    validator = Draft202012Validator(load_json(schema_path))
    data = load_json(config_file)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    return [f"{'/'.join(map(str, e.path)) or '(root)'}: {e.message}" for e in errors]


def validate_files_against_schema(schema_path: Path, config_files: list[Path]) -> bool:
    """Validate a list of config files against a schema."""
    try:
        Draft202012Validator.check_schema(load_json(schema_path))
    except Exception as e:
        print(f"[X] Schema {schema_path}: {e}")
        return False

    if not config_files:
        print(f"[X] No config files matched for {schema_path.name}")
        return False

    all_valid = True
    for config_file in config_files:
        try:
            errors = collect_errors(schema_path, config_file)
        except ValueError as e:
            print(f"[X] {config_file}: {e}")
            all_valid = False
            continue

        if errors:
            all_valid = False
            print(f"[X] {config_file}: {len(errors)} error(s)")
            for error in errors:
                print(f"  - {error}")
        else:
            print(f"[OK] {config_file}: OK")

    return all_valid


def main():
    """Main validation function."""
    all_valid = True

    print("Validating JSON configuration files against schemas...")
    print()

    for schema_file, patterns in SCHEMA_MAPPINGS.items():
        schema_path = PROJECT_ROOT / schema_file
        config_paths = resolve_config_files(patterns)

        print(f"Validating against {schema_file}:")
        if not validate_files_against_schema(schema_path, config_paths):
            all_valid = False
        print()

    if all_valid:
        print("All configuration files are valid! [OK]")
        sys.exit(0)
    else:
        print("Some configuration files have validation errors! [X]")
        sys.exit(1)


if __name__ == "__main__":
    main()
