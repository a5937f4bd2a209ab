#!/usr/bin/env python3
"""Validate schedule YAML files against the schema."""
import json
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from maintenance.errors import ConfigurationError
from maintenance.loader import parse_schedule


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def check_schedules(data: dict) -> list[str]:
    """Semantic checks the schema cannot express (e.g. endDate before startDate)."""
    errors = []
    for entry in data.get("schedules") or []:
        try:
            parse_schedule(entry).validate()
        except ConfigurationError as e:
            errors.append(f"Configuration error: {e}")
    return errors


def validate_schedule_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single schedule YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            # unquoted YAML dates load as date objects; the schema expects strings
            data = json.loads(json.dumps(yaml.safe_load(f), default=str))
        validate(instance=data, schema=schema)
        errors.extend(check_schedules(data))
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except Exception as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate the given schedule files, or all YAML files in schedules/."""
    argv = sys.argv[1:] if argv is None else argv
    schema = load_schema()

    if argv:
        yaml_files = [Path(p) for p in argv]
    else:
        schedules_dir = Path(__file__).parent / "schedules"
        if not schedules_dir.exists():
            print(f"Error: schedules directory not found: {schedules_dir}")
            return 1
        yaml_files = list(schedules_dir.glob("*.yaml")) + list(schedules_dir.glob("*.yml"))
        if not yaml_files:
            print(f"Warning: No YAML files found in {schedules_dir}")
            return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_schedule_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
