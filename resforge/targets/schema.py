"""Pydantic models for target declaration validation.

A declaration lists build targets as typed data: artifacts are either an
explicit path or the manifest of a contract project, and recipes are argv
lists with a working directory. Paths stay relative here; they are resolved
against the build root when the graph is built.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from resforge.config import DEFAULT_AGGREGATE_TARGET

TARGET_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.\-]+$")


class CopySchema(BaseModel):
    """Schema for the copy phase of a recipe.

    Attributes:
        source: Directory holding produced files, relative to the recipe's
            working directory.
        pattern: Glob of files to copy.
        destination: Destination directory, relative to the build root.
    """

    model_config = ConfigDict(extra="forbid")

    source: str = Field(description="Directory of produced files")
    pattern: str = Field(default="*", min_length=1, description="Glob of files")
    destination: str = Field(default=".", description="Destination directory")


class RecipeSchema(BaseModel):
    """Schema for a target recipe.

    Attributes:
        cwd: Working directory, relative to the build root.
        command: Executable invocation as an argv list.
        env: Extra environment variables.
        copy: Optional copy phase after the command succeeds.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    cwd: str = Field(default=".", description="Working directory")
    command: list[str] = Field(min_length=1, description="argv-style command")
    env: dict[str, str] = Field(default_factory=dict)
    copy_outputs: CopySchema | None = Field(default=None, alias="copy")

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        """Validate the executable is not blank."""
        if not v[0].strip():
            raise ValueError("command executable must not be empty")
        return v


class ArtifactSchema(BaseModel):
    """Schema for a target artifact.

    Exactly one of ``path`` or ``contract`` must be given.

    Attributes:
        path: Explicit artifact path, relative to the build root.
        contract: Contract project directory whose toolchain manifest is
            the artifact.
    """

    model_config = ConfigDict(extra="forbid")

    path: str | None = Field(default=None)
    contract: str | None = Field(default=None)

    @model_validator(mode="after")
    def validate_one_form(self) -> "ArtifactSchema":
        """Validate exactly one artifact form is set."""
        if (self.path is None) == (self.contract is None):
            raise ValueError("artifact needs exactly one of 'path' or 'contract'")
        return self


class TargetSchema(BaseModel):
    """Schema for a single build target.

    Attributes:
        name: Unique target name.
        artifact: Output marking the target as satisfied (phony if unset).
        prerequisites: Targets to satisfy first, in order.
        recipe: External command (none for pure aggregates).
        always_rebuild: Never skip on artifact presence.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=128)
    artifact: ArtifactSchema | None = None
    prerequisites: list[str] = Field(default_factory=list)
    recipe: RecipeSchema | None = None
    always_rebuild: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name contains only safe characters."""
        if not TARGET_NAME_PATTERN.match(v):
            raise ValueError(
                f"name must contain only alphanumeric, underscore, dot, "
                f"or hyphen characters, got '{v}'"
            )
        return v


class DeclarationSchema(BaseModel):
    """Schema for a complete target declaration.

    Attributes:
        toolchain: Toolchain name for contract manifest paths (overrides
            the configured default when set).
        aggregate: Name of the synthesized aggregate target.
        targets: Declared targets in order.
    """

    model_config = ConfigDict(extra="forbid")

    toolchain: str | None = Field(default=None, min_length=1)
    aggregate: str = Field(default=DEFAULT_AGGREGATE_TARGET, min_length=1)
    targets: list[TargetSchema] = Field(default_factory=list)


__all__ = [
    "TARGET_NAME_PATTERN",
    "ArtifactSchema",
    "CopySchema",
    "DeclarationSchema",
    "RecipeSchema",
    "TargetSchema",
]
