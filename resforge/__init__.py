"""resforge - build orchestration for e2e driver and contract resources.

This package declares named build targets, orders them by their
prerequisites, skips targets whose artifacts already exist, and dispatches
the rest to external builders. It also carries the nightly release tooling.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
