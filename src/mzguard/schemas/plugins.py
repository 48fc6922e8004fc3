"""Schemas for plugin headers, override conflicts and dependency reports."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PROTOTYPE_MARKER = ".prototype."


def make_signature(class_name: str, method_name: str) -> str:
    """Build an override signature such as ``Game_Map.prototype.update``."""
    return f"{class_name}{PROTOTYPE_MARKER}{method_name}"


def split_signature(signature: str) -> tuple[str, str]:
    """
    Split an override signature on the first ``.prototype.`` marker.

    A string without the marker is returned as both class and method name.
    """
    class_name, marker, method_name = signature.partition(PROTOTYPE_MARKER)
    if not marker:
        return signature, signature
    return class_name, method_name


class PluginHeader(BaseModel):
    """A plugin's identity plus its deduplicated override set."""

    filename: str = Field(default="", description="Plugin file name, e.g. 'MyPlugin.js'")
    name: str = Field(description="Plugin name as used in the project load order")
    overrides: list[str] = Field(
        default_factory=list,
        description="Override signatures: ClassName.prototype.methodName",
    )
    base: list[str] = Field(default_factory=list, description="@base dependencies")
    order_after: list[str] = Field(default_factory=list, description="@orderAfter entries")
    order_before: list[str] = Field(default_factory=list, description="@orderBefore entries")
    description: str = Field(default="", description="@plugindesc text")

    @field_validator("overrides", mode="before")
    @classmethod
    def dedupe_overrides(cls, v) -> list[str]:
        """Keep each signature once, in first-seen order."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return list(dict.fromkeys(str(item) for item in v))


class OverrideIndex(BaseModel):
    """Signature -> plugin names in load order, plus the raw override count."""

    methods: dict[str, list[str]] = Field(default_factory=dict)
    total_overrides: int = 0


class PluginConflict(BaseModel):
    """A method slot patched by two or more plugins."""

    model_config = ConfigDict(populate_by_name=True)

    method: str = Field(description="Full signature, e.g. 'Game_Actor.prototype.setup'")
    plugins: list[str] = Field(min_length=2, description="Plugin names in load order")
    severity: Literal["warning", "info"]
    class_name: str = Field(alias="className")
    method_name: str = Field(alias="methodName")


class ConflictReport(BaseModel):
    """Sorted conflicts with override totals and overall health."""

    model_config = ConfigDict(populate_by_name=True)

    conflicts: list[PluginConflict] = Field(default_factory=list)
    total_overrides: int = Field(default=0, alias="totalOverrides")
    health: Literal["clean", "conflicts"] = "clean"

    @model_validator(mode="after")
    def check_health(self) -> "ConflictReport":
        expected = "conflicts" if self.conflicts else "clean"
        if self.health != expected:
            raise ValueError(
                f"health must be '{expected}' for {len(self.conflicts)} conflict(s)"
            )
        return self


class DependencyIssue(BaseModel):
    """A problem with declared plugin dependencies or their order."""

    type: Literal["missing", "circular", "load-order", "duplicate"]
    severity: Literal["error", "warning"]
    plugin_name: str
    message: str
    details: Optional[str] = None


class DependencyReport(BaseModel):
    """Result of validating @base / @orderAfter declarations."""

    issues: list[DependencyIssue] = Field(default_factory=list)
    health: Literal["healthy", "warnings", "errors"] = "healthy"
    load_order: list[str] = Field(default_factory=list)
    plugin_names: list[str] = Field(default_factory=list)


class PopularityEnrichment(BaseModel):
    """Class and method popularity counted over a plugin corpus."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = "1"
    generated_at: str = Field(alias="generatedAt")
    plugin_count: int = Field(alias="pluginCount")
    class_popularity: dict[str, int] = Field(default_factory=dict, alias="classPopularity")
    method_popularity: dict[str, int] = Field(default_factory=dict, alias="methodPopularity")


class ScanError(BaseModel):
    """A plugin file that could not be read."""

    file: str
    error: str
    type: str


class ProjectAnalysis(BaseModel):
    """Everything produced by one analysis run."""

    project_path: str
    plugins: list[PluginHeader] = Field(default_factory=list)
    dependencies: Optional[DependencyReport] = None
    conflicts: Optional[ConflictReport] = None
    errors: list[ScanError] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
