"""Error taxonomy for the asset pipeline.

Every error here is recovered at the pipeline boundary: the page keeps
its original, unminified reference.
"""


class AssetMinifierError(Exception):
    """Base class for pipeline errors."""


class SourceNotFound(AssetMinifierError):
    """The public URL does not map to a readable local file."""


class ArtifactIOError(AssetMinifierError):
    """Reading the source or writing an artifact failed."""


class MinifyError(AssetMinifierError):
    """The external minifier raised while processing a source."""
