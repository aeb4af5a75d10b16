"""Find the model files an annotation tool should process."""

from modelfinder.file_resolver import (
    FileResolver,
    FileResolverConfig,
    ModelFile,
)

__all__ = [
    "FileResolver",
    "FileResolverConfig",
    "ModelFile",
]
