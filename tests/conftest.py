from datetime import datetime, timezone
from types import MappingProxyType
from unittest.mock import MagicMock

import pytest

from core.enums import ActivityLevel
from modules.memory.long_term_memory import LongTermMemory
from modules.tool_usage.destination_tool import DestinationTool
from modules.tool_usage.feedback_tool import FeedbackTool
from modules.tool_usage.profile_tool import ProfileTool
from schemas.destination import Destination, GeoPoint, SeasonInfo
from schemas.preferences import PreferenceProfile
from schemas.recommendation import ScoredDestination


CENTER = GeoPoint(lat=48.8566, lng=2.3522)


# Helpers
def make_destination(
    id: str,
    categories=(),
    cost_level: int = 3,
    visit_duration: int = 60,
    popularity: float = 0.0,
    attributes=None,
    type: str = "",
    seasonality=None,
    best_time_of_day=None,
    location: GeoPoint = CENTER,
) -> Destination:
    return Destination(
        id=id,
        name=f"Place {id}",
        location=location,
        categories=frozenset(categories),
        cost_level=cost_level,
        visit_duration=visit_duration,
        popularity=popularity,
        attributes=MappingProxyType(dict(attributes or {})),
        seasonality=MappingProxyType({k: SeasonInfo(**v) for k, v in (seasonality or {}).items()}),
        type=type,
        best_time_of_day=best_time_of_day,
    )


def make_scored(id: str, score: float, **kwargs) -> ScoredDestination:
    return ScoredDestination(destination=make_destination(id, **kwargs), score=score)


@pytest.fixture
def museum_lover():
    return PreferenceProfile(
        categories=frozenset({"museums"}),
        cost_level=3,
        activity_level=ActivityLevel.MODERATE,
    )


@pytest.fixture
def memory():
    return LongTermMemory()


@pytest.fixture
def profile_tool():
    tool = MagicMock(spec=ProfileTool)
    tool.get_preferences.return_value = None
    return tool


@pytest.fixture
def destination_tool():
    return MagicMock(spec=DestinationTool)


@pytest.fixture
def feedback_tool():
    tool = MagicMock(spec=FeedbackTool)
    tool.get_feedback.return_value = []
    return tool


@pytest.fixture
def fixed_now():
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
