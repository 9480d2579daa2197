"""Public package interface for the Cortex connector."""

__all__ = [
    "__version__",
    "CortexConnector",
    "HealthValue",
    "InstancePool",
    "JobRouter",
    "Settings",
]
__version__ = "0.1.0"

from .config import Settings
from .connector import CortexConnector
from .models import HealthValue
from .pool import InstancePool
from .router import JobRouter
