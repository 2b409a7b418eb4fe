"""
Data model for the Travel Companion core.

City records are parsed from the JSON dataset (which uses the original
camelCase field names as aliases) and are frozen once loaded.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class NotablePlace(BaseModel):
    """A top spot inside a city."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    category: str = Field(default="", alias="type")
    rating: Number = 0


class Review(BaseModel):
    """A traveller review of a city."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    author: str = Field(alias="user")
    text: str
    rating: Number = 0


class CityRecord(BaseModel):
    """
    One city from the structured dataset.

    Example JSON:
        {"city": "Jaipur", "state": "Rajasthan", "avgHotelPerNight": 2500,
         "avgFoodPerDay": 800, "petrolPerKm": 7,
         "topSpots": [{"name": "Hawa Mahal", "type": "monument", "rating": 4.6}],
         "reviews": [{"user": "asha", "text": "Loved it", "rating": 5}]}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="city", min_length=1)
    region: str = Field(alias="state")
    average_lodging_cost: Number = Field(alias="avgHotelPerNight")
    average_food_cost: Number = Field(alias="avgFoodPerDay")
    per_distance_unit_fuel_cost: Number = Field(alias="petrolPerKm")
    notable_places: Tuple[NotablePlace, ...] = Field(default=(), alias="topSpots")
    reviews: Tuple[Review, ...] = ()


class RetrievedSnippet(BaseModel):
    """A passage returned by the semantic index, validated at the retrieval boundary."""

    model_config = ConfigDict(frozen=True)

    source_label: str = Field(min_length=1)
    text: str = Field(min_length=1)
    similarity_score: float


@dataclass(frozen=True)
class Turn:
    """One priming turn. ``role`` is either ``"user"`` or ``"model"``."""

    role: str
    text: str


ConversationSeed = Tuple[Turn, ...]
