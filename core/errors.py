"""
core/errors.py
--------------
Error taxonomy of the recommendation core.

  InputError                 malformed caller input; rejected immediately, never retried.
  NoCandidatesError          nothing to schedule. Only raised for refinement
                             (EmptyRefinementError); elsewhere an empty pool is an
                             empty itinerary.
  PreferenceUnavailableError preference lookups failed; absorbed by the Scorer.
  LearnerInputError          invalid learner parameters. Empty history is a no-op.
  MalformedRecordError       one catalog/feedback record could not be parsed;
                             caught per item and logged.
  ServiceUnavailableError    catalog or feedback store unreachable; propagated.
"""

from __future__ import annotations


class RecommendationError(Exception):
    """Base class for every error raised by the recommendation core."""


class InputError(RecommendationError, ValueError):
    pass


class NoCandidatesError(RecommendationError):
    pass


class EmptyRefinementError(NoCandidatesError):
    def __init__(self, message: str = "Cannot refine itinerary with all destinations removed"):
        super().__init__(message)


class PreferenceUnavailableError(RecommendationError):
    pass


class LearnerInputError(RecommendationError, ValueError):
    pass


class MalformedRecordError(RecommendationError):
    def __init__(self, message: str, record_id: str | None = None):
        super().__init__(message)
        self.record_id = record_id


class ServiceUnavailableError(RecommendationError):
    def __init__(self, message: str, service: str = ""):
        super().__init__(message)
        self.service = service
