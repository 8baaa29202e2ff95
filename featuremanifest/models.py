"""Pydantic models for manifest features and bundle plans."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


_CLIENT_FIELDS = ("feature", "bundle", "legacy")


class FeatureClient(BaseModel):
    """Client-side (UI bundling) settings of a feature."""

    model_config = ConfigDict(extra="allow")

    feature: Optional[str] = None
    bundle: Optional[str] = None
    legacy: Optional[bool] = None


class Feature(BaseModel):
    """A manifest feature record, e.g. ``brand.features.homepage``."""

    model_config = ConfigDict(extra="allow")

    package: str = ""
    enabled: bool = True
    client: FeatureClient = Field(default_factory=FeatureClient)

    @property
    def segments(self) -> list[str]:
        return self.package.split(".")

    @property
    def name(self) -> str:
        return self.segments[-1]

    @property
    def project(self) -> str:
        return self.segments[0]

    def to_manifest(self) -> dict[str, Any]:
        """Serialize for the persisted manifest, omitting unset client fields."""
        data = self.model_dump()
        client = self.client.model_dump()
        for field in _CLIENT_FIELDS:
            if client.get(field) is None:
                client.pop(field, None)
        data["client"] = client
        return data


class ReconcileResult(BaseModel):
    models: list[Feature] = Field(default_factory=list)
    names: list[str] = Field(default_factory=list)


class BundlePlan(BaseModel):
    """Inputs handed to the bundler config assembler."""

    entries: dict[str, list[str]] = Field(default_factory=dict)
    enabled_features: list[str] = Field(default_factory=list)
    common_bundle: str = "common"
    common_filename: str = "common.js"
