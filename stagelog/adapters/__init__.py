# Import all adapters to trigger registration with the registry.
from stagelog.adapters import caveat  # noqa: F401
