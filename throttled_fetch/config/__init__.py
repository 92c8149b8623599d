"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import DrainPolicy, FetchSettings, TransportSettings

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DrainPolicy",
    "FetchSettings",
    "TransportSettings",
]
