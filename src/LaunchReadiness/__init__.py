"""LaunchReadiness package exports."""

from .readiness import __all__ as _readiness_all
from .readiness import *  # noqa: F401,F403

__version__ = "0.1.0"

__all__ = [*_readiness_all, "__version__"]
