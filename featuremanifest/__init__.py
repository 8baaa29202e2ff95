"""Build-time feature manifest resolver for base/brand project trees."""

__version__ = "0.3.0"
