"""Target declaration import/export.

This module provides helpers for loading target declarations from YAML or
JSON files and rendering declarations back to those formats.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from resforge.targets.schema import DeclarationSchema


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the content is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the content is not an object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_declaration_data(data: dict[str, Any]) -> DeclarationSchema:
    """Validate declaration data using the schema.

    Raises:
        pydantic.ValidationError: If data does not match schema.
    """
    return DeclarationSchema.model_validate(data)


def load_declaration(path: Path) -> DeclarationSchema:
    """Load and validate a declaration from a file (YAML or JSON).

    File format is determined by extension (.yaml, .yml for YAML,
    .json for JSON).

    Args:
        path: Path to the declaration file.

    Returns:
        Validated DeclarationSchema instance.

    Raises:
        ValueError: If file extension is not supported.
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If data does not match schema.
    """
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = load_yaml(path)
    elif suffix == ".json":
        data = load_json(path)
    else:
        raise ValueError(
            f"Unsupported file extension '{suffix}'. Use .yaml, .yml, or .json"
        )
    return parse_declaration_data(data)


def declaration_to_dict(declaration: DeclarationSchema) -> dict[str, Any]:
    """Dump a declaration to plain data, using file field names."""
    return declaration.model_dump(by_alias=True, exclude_none=True)


def declaration_to_yaml_string(declaration: DeclarationSchema) -> str:
    """Convert a declaration to a YAML string."""
    result: str = yaml.dump(
        declaration_to_dict(declaration),
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
    return result


def declaration_to_json_string(declaration: DeclarationSchema) -> str:
    """Convert a declaration to a JSON string."""
    return json.dumps(declaration_to_dict(declaration), indent=2, ensure_ascii=False)


__all__ = [
    "declaration_to_dict",
    "declaration_to_json_string",
    "declaration_to_yaml_string",
    "load_declaration",
    "load_json",
    "load_yaml",
    "parse_declaration_data",
]
