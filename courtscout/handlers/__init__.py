"""Handlers package."""
from courtscout.handlers.venue_handler import VenueHandler

__all__ = ["VenueHandler"]
