"""
pqgate
Persisted query resolution for GraphQL over HTTP
"""

__version__ = "0.1.0"

from .engine import Failed, Resolved, ResolutionEngine
from .errors import ConfigurationError, ErrorKind, map_error
from .hashing import compute_hash, verify
from .modes import PersistedQueryDefaults, PersistedQueryMode, PersistedQuerySettings
from .request import IncomingRequest

__all__ = [
    "__version__",
    "ConfigurationError",
    "ErrorKind",
    "Failed",
    "IncomingRequest",
    "PersistedQueryDefaults",
    "PersistedQueryMode",
    "PersistedQuerySettings",
    "ResolutionEngine",
    "Resolved",
    "compute_hash",
    "map_error",
    "verify",
]
