from enum import Enum


class ActivityLevel(str, Enum):
    RELAXED = "relaxed"
    MODERATE = "moderate"
    ACTIVE = "active"


class TransportMode(str, Enum):
    WALKING = "walking"
    TRANSIT = "transit"
    DRIVING = "driving"
    CYCLING = "cycling"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class Weather(str, Enum):
    SUNNY = "sunny"
    RAINY = "rainy"
    CLOUDY = "cloudy"
    COLD = "cold"
    HOT = "hot"
    SNOW = "snow"


class FeedbackOutcome(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class PreferenceSource(str, Enum):
    EXPLICIT = "explicit"    # fetched from the profile service
    DERIVED = "derived"      # produced by PreferenceLearner
    DEFAULT = "default"      # new-user fallback


class Impact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class Magnitude(str, Enum):
    MODERATE = "moderate"
    STRONG = "strong"
