"""Target service module.

Turns a declaration into a validated dependency graph:
- Loading the configured declaration (file or built-in)
- Resolving artifact and recipe paths against the build root
- Registering targets and synthesizing the aggregate target
- Validating the graph before any recipe runs
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from resforge.builds.graph import DependencyGraph
from resforge.builds.locator import contract_manifest_path, resolve_path
from resforge.builds.models import BuildTarget, CopyStep, Recipe
from resforge.config import DEFAULT_TOOLCHAIN
from resforge.errors import DeclarationError
from resforge.targets.defaults import default_declaration
from resforge.targets.io import load_declaration
from resforge.targets.schema import DeclarationSchema, TargetSchema

logger = logging.getLogger(__name__)


def load_declaration_file(path: Path | None) -> DeclarationSchema:
    """Load a declaration file, or the built-in declaration.

    Args:
        path: Declaration file, or None for the built-in targets.

    Returns:
        Validated DeclarationSchema.

    Raises:
        DeclarationError: If the file cannot be read or is invalid.
    """
    if path is None:
        return default_declaration()

    logger.debug("Loading target declaration from %s", path)
    try:
        return load_declaration(path)
    except ValidationError as e:
        raise DeclarationError(f"Invalid declaration {path}: {e}") from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DeclarationError(f"Parse error in {path}: {e}") from e
    except (OSError, ValueError) as e:
        raise DeclarationError(f"Cannot load {path}: {e}") from e


def to_build_target(schema: TargetSchema, build_root: Path, toolchain: str) -> BuildTarget:
    """Convert a declared target into a BuildTarget with resolved paths.

    Args:
        schema: Declared target.
        build_root: Root directory of the build.
        toolchain: Toolchain name for contract manifest paths.

    Returns:
        BuildTarget ready for registration.
    """
    artifact_path: Path | None = None
    if schema.artifact is not None:
        if schema.artifact.contract is not None:
            artifact_path = contract_manifest_path(
                schema.artifact.contract, build_root, toolchain
            )
        elif schema.artifact.path is not None:
            artifact_path = resolve_path(schema.artifact.path, build_root)

    recipe: Recipe | None = None
    if schema.recipe is not None:
        working_directory = resolve_path(schema.recipe.cwd, build_root)
        copy_step: CopyStep | None = None
        if schema.recipe.copy_outputs is not None:
            copy_schema = schema.recipe.copy_outputs
            copy_step = CopyStep(
                source_dir=resolve_path(copy_schema.source, working_directory),
                destination=resolve_path(copy_schema.destination, build_root),
                pattern=copy_schema.pattern,
            )
        recipe = Recipe(
            working_directory=working_directory,
            command=tuple(schema.recipe.command),
            env=tuple(schema.recipe.env.items()),
            copy_outputs=copy_step,
        )

    return BuildTarget(
        name=schema.name,
        artifact_path=artifact_path,
        prerequisites=tuple(schema.prerequisites),
        recipe=recipe,
        always_rebuild=schema.always_rebuild,
    )


def build_graph(
    declaration: DeclarationSchema,
    build_root: Path,
    toolchain: str | None = None,
) -> DependencyGraph:
    """Build and validate the dependency graph for a declaration.

    The declaration's toolchain wins over the ``toolchain`` argument,
    which in turn defaults to DEFAULT_TOOLCHAIN.

    Args:
        declaration: Validated declaration.
        build_root: Root directory relative paths resolve against.
        toolchain: Toolchain name for contract manifest paths.

    Returns:
        DependencyGraph including the aggregate target.

    Raises:
        DuplicateTargetError: If a target name is declared twice, or
            collides with the aggregate name.
        UnknownTargetError: If a prerequisite is not declared.
        CyclicDependencyError: If the declaration contains a cycle.
    """
    build_root = build_root.expanduser().resolve()
    effective_toolchain = declaration.toolchain or toolchain or DEFAULT_TOOLCHAIN

    graph = DependencyGraph()
    for schema in declaration.targets:
        graph.register(to_build_target(schema, build_root, effective_toolchain))
    graph.add_aggregate(declaration.aggregate)
    graph.validate()

    logger.debug(
        "Built graph with %d target(s) at %s (toolchain %s)",
        len(graph),
        build_root,
        effective_toolchain,
    )
    return graph


__all__ = ["build_graph", "load_declaration_file", "to_build_target"]
