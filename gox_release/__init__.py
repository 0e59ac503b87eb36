"""gox-release - Cross-compiled Go release archives.

This package provides a release workflow step that cross-compiles a Go
binary for an (OS, architecture) matrix with gox and packages each
resulting binary into its own zip archive.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
