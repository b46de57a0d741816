"""psyscore: questionnaire scoring, confidence bands and multi-indicator validation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("psyscore")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
__all__ = ["__version__"]
