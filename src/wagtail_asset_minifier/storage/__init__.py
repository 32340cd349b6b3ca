from .local import ArtifactPaths, ArtifactStore

__all__ = ["ArtifactPaths", "ArtifactStore"]
