"""Target declaration module.

This module handles:
- Declaration schema validation
- Declaration import/export (YAML/JSON)
- The built-in e2e resource targets
- Conversion of declarations into a dependency graph
"""

from resforge.targets.schema import (
    ArtifactSchema,
    CopySchema,
    DeclarationSchema,
    RecipeSchema,
    TargetSchema,
)

__all__ = [
    "ArtifactSchema",
    "CopySchema",
    "DeclarationSchema",
    "RecipeSchema",
    "TargetSchema",
]
