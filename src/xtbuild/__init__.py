"""
xtbuild - Build orchestrator for extension-based client and database builds
"""

__version__ = "0.1.0"

from .core import Builder, build
from .errors import BuildError, BuildValidationError
from .models import BuildOptions, BuildSpecification

__all__ = ["Builder", "build", "BuildError", "BuildValidationError", "BuildOptions", "BuildSpecification"]
