"""
Trip cost estimation from per-city averages.
"""

import math
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt

from travel_companion.models import Number

Amount = Union[NonNegativeInt, NonNegativeFloat]

# Fixed per-night budget for activities.
FUN_BUDGET_PER_NIGHT = 1000


class CostParams(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    distance_km: Amount = Field(alias="distanceKm")
    nights: int = Field(ge=0)
    hotel_per_night: Amount = Field(alias="hotelPerNight")
    food_per_day: Amount = Field(alias="foodPerDay")
    petrol_per_km: Amount = Field(alias="petrolPerKm")


class CostEstimate(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    fuel_cost: int = Field(alias="fuelCost")
    hotel: Number
    food: Number
    fun: Number
    total: Number


def estimate_trip_cost(params: CostParams) -> CostEstimate:
    """
    Estimate a trip's cost.

    Fuel is rounded half-up to a whole amount; hotel, food and the fixed fun
    budget scale with the number of nights. Whole-number inputs give
    whole-number outputs.

    Example:
        >>> estimate_trip_cost(CostParams(distanceKm=300, nights=2,
        ...     hotelPerNight=2500, foodPerDay=800, petrolPerKm=7.5)).total
        10850
    """
    fuel_cost = math.floor(params.distance_km * params.petrol_per_km + 0.5)
    hotel = params.nights * params.hotel_per_night
    food = params.nights * params.food_per_day
    fun = params.nights * FUN_BUDGET_PER_NIGHT
    total = fuel_cost + hotel + food + fun

    return CostEstimate(fuel_cost=fuel_cost, hotel=hotel, food=food, fun=fun, total=total)
