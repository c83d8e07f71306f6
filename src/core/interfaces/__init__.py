"""Interfaces of the core.

Protocols implemented by adapters (hosted model, geocoding) so the flows
depend on contracts, not on SDKs.
"""

from core.interfaces.generative_model import GenerativeModel
from core.interfaces.geocoder import Geocoder

__all__ = ["GenerativeModel", "Geocoder"]
