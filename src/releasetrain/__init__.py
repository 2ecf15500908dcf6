"""releasetrain - release train versioning and dependency-ordered build execution."""

__version__ = "0.1.0"
