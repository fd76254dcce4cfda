"""Nightly release module.

This module handles:
- Assembling the dated release bundle from upstream binaries and
  repository-resident contract artifacts
- Publishing the bundle as a pre-release
- Pruning older nightly releases and their tags
"""

from resforge.release.bundle import ReleaseAssemblyError, ReleaseBundle
from resforge.release.github import GitHubReleaseClient, PublishError

__all__ = [
    "GitHubReleaseClient",
    "PublishError",
    "ReleaseAssemblyError",
    "ReleaseBundle",
]
