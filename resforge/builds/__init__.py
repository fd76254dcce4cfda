"""Build orchestration module.

This module handles:
- Build target models and the dependency graph
- Artifact presence checks
- Running external recipes
- Sequential, incremental scheduling of a requested target
"""

from resforge.builds.graph import DependencyGraph
from resforge.builds.models import BuildTarget, CopyStep, Recipe

__all__ = ["BuildTarget", "CopyStep", "DependencyGraph", "Recipe"]

# Lazy imports for submodules to avoid circular imports
# Access via resforge.builds.scheduler, etc.
