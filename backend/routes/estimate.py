"""
Trip cost estimate route.
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from backend.middlewares import bearer_token_required, rate_limited
from travel_companion.rag.matcher import best_city
from travel_companion.utils import CostParams, estimate_trip_cost

logger = logging.getLogger(__name__)

estimate_bp = Blueprint("estimate", __name__, url_prefix="/api/estimate")


@estimate_bp.route("", methods=["POST"])
@rate_limited
@bearer_token_required
def estimate():
    """
    Estimate the cost of a trip.

    Request body:
        {
            "distanceKm": 300,
            "nights": 2,
            "city": "Jaipur",           (optional, fills missing rates)
            "hotelPerNight": 2500,      (optional when city is given)
            "foodPerDay": 800,          (optional when city is given)
            "petrolPerKm": 7.5          (optional when city is given)
        }

    Response:
        {"fuelCost": ..., "hotel": ..., "food": ..., "fun": ..., "total": ..., "city": ...}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON body is required"}), 400

    params = dict(data)
    city_name = params.pop("city", None)
    matched = None
    if city_name:
        streamer = current_app.extensions.get("response_streamer")
        records = streamer.records if streamer else ()
        matched = best_city(str(city_name), records)
        if matched is None:
            return jsonify({"error": f"Unknown city: {city_name}"}), 404
        params.setdefault("hotelPerNight", matched.average_lodging_cost)
        params.setdefault("foodPerDay", matched.average_food_cost)
        params.setdefault("petrolPerKm", matched.per_distance_unit_fuel_cost)

    try:
        cost_params = CostParams.model_validate(params)
    except ValidationError as e:
        return jsonify({"error": "Invalid estimate request", "details": e.errors(include_url=False, include_context=False)}), 400

    result = estimate_trip_cost(cost_params).model_dump(by_alias=True)
    result["city"] = matched.name if matched else None
    logger.info(f"Estimated trip cost: total={result['total']}")
    return jsonify(result), 200
