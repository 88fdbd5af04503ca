"""openhab_provider.

Declarative management of openHAB items and item-channel links.

Configuration is decoded into tri-state attribute values, validated (including
the item type grammar) and applied through the openHAB REST API.
"""

__version__ = "0.1.0"

from openhab_provider.host import ProviderHost
from openhab_provider.provider import OpenhabProvider, ProviderContext

__all__ = [
    "OpenhabProvider",
    "ProviderContext",
    "ProviderHost",
]
