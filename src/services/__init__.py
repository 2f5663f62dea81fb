# src/services/__init__.py
from .listing_client import HttpListingService, ListingService

__all__ = ["ListingService", "HttpListingService"]
