"""modules/planning: greedy itinerary construction and refinement."""

from modules.planning.itinerary_builder import ItineraryBuilder

__all__ = ["ItineraryBuilder"]
