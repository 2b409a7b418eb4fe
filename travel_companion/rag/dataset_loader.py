"""
Loads the structured city dataset (``travelData.json``).
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from travel_companion.models import CityRecord

logger = logging.getLogger(__name__)


def load_travel_data(path: Union[str, Path]) -> List[CityRecord]:
    """
    Load and validate the city dataset.

    The file holds ``{"cities": [...]}``. An unreadable or malformed file is
    logged and yields an empty dataset, so queries fall back to the
    "no specific city" context instead of taking the service down.

    Args:
        path: Path to the JSON file

    Returns:
        City records in file order
    """
    path = Path(path)
    logger.info(f"📂 Loading structured data from {path}...")
    try:
        with path.open(encoding="utf-8") as fh:
            raw = json.load(fh)
        cities = [CityRecord.model_validate(item) for item in raw.get("cities") or []]
    except (OSError, ValueError, AttributeError, ValidationError) as e:
        logger.error(f"❌ Failed to load or parse {path}: {e}")
        return []

    logger.info(f"   Loaded {len(cities)} cities")
    return cities
