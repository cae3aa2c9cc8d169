"""Domain errors for xtbuild."""


class BuildError(RuntimeError):
    """Raised when the build cannot continue."""


class BuildValidationError(BuildError):
    """Raised when the requested options contradict each other."""
