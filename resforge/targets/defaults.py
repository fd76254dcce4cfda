"""Built-in target declaration for the e2e resource tree.

Paths are relative to the build root (the e2e resource directory).
Drivers are rebuilt on every run; contract targets are skipped while
their manifest exists.
"""

from resforge.targets.schema import (
    ArtifactSchema,
    CopySchema,
    DeclarationSchema,
    RecipeSchema,
    TargetSchema,
)

DRIVER_DIR = "../../crates/pink-drivers"
CHECK_SYSTEM_DIR = "check_system"
INDETERMINISTIC_FUNCTIONS_DIR = "indeterministic_functions"

CONTRACT_BUILD_COMMAND = ["cargo", "contract", "build", "--release"]


def default_declaration() -> DeclarationSchema:
    """Return the built-in declaration.

    Returns:
        DeclarationSchema with drivers, check_system and
        indeterministic_functions; "all" is synthesized over them.
    """
    return DeclarationSchema(
        targets=[
            TargetSchema(
                name="drivers",
                always_rebuild=True,
                recipe=RecipeSchema(
                    cwd=DRIVER_DIR,
                    command=["./build.sh"],
                    copy=CopySchema(source="dist", pattern="*", destination="."),
                ),
            ),
            TargetSchema(
                name="check_system",
                artifact=ArtifactSchema(contract=CHECK_SYSTEM_DIR),
                recipe=RecipeSchema(cwd=CHECK_SYSTEM_DIR, command=["make"]),
            ),
            TargetSchema(
                name="indeterministic_functions",
                artifact=ArtifactSchema(contract=INDETERMINISTIC_FUNCTIONS_DIR),
                recipe=RecipeSchema(
                    cwd=INDETERMINISTIC_FUNCTIONS_DIR,
                    command=list(CONTRACT_BUILD_COMMAND),
                ),
            ),
        ],
    )


__all__ = [
    "CHECK_SYSTEM_DIR",
    "CONTRACT_BUILD_COMMAND",
    "DRIVER_DIR",
    "INDETERMINISTIC_FUNCTIONS_DIR",
    "default_declaration",
]
