"""Compilation metadata providers."""

from .base import MetadataProvider
from .manifest import ManifestError, ManifestMetadataProvider
from .response_files import parse_response_file, read_response_file

__all__ = [
    "ManifestError",
    "ManifestMetadataProvider",
    "MetadataProvider",
    "parse_response_file",
    "read_response_file",
]
