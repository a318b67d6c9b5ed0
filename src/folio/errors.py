# ABOUTME: Terminal error taxonomy for package parsing.
# ABOUTME: Each error names the stage of the parse that could not continue.


class PackageError(Exception):
    """Base class for errors that abort a parse with no manifest."""

    stage = "package"


class PathTraversalError(PackageError):
    """Raised when a path taken from package contents escapes the package root."""

    stage = "path"


class MissingRootfileError(PackageError):
    """Raised when container.xml exists but declares no package document."""

    stage = "container"


class NoPackageDocumentError(PackageError):
    """Raised when no container.xml exists and no .opf file can be found."""

    stage = "container"


class PackageReadError(PackageError):
    """Raised when the package document cannot be read or parsed."""

    stage = "package"


class EmptySpineError(PackageError):
    """Raised when no spine entry resolves to a manifest href."""

    stage = "spine"
