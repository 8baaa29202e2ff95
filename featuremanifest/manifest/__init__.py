"""Manifest discovery, reading and writing."""

from featuremanifest.manifest.discovery import RESERVED_FEATURE_NAMES, discover_features
from featuremanifest.manifest.reader import FeatureManifest, parse_features, read_manifest
from featuremanifest.manifest.writer import build_feature_model, reconcile_features, write_manifest

__all__ = [
    "RESERVED_FEATURE_NAMES",
    "discover_features",
    "FeatureManifest",
    "parse_features",
    "read_manifest",
    "build_feature_model",
    "reconcile_features",
    "write_manifest",
]
