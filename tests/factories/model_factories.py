"""
Randomized model factories.

Every factory call generates randomized non-identity fields
(names, timestamps, suffixes) so tests cannot rely on specific
default values.
"""

import random
import string
import uuid
from datetime import datetime, timezone, timedelta

# Side of a square of roughly 1000 m2 at the equator, in degrees
SQUARE_1000_M2_SIDE = 0.0002843


def _random_suffix(length: int = 6) -> str:
    """Generate random alphanumeric suffix."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def _random_timestamp() -> datetime:
    """Generate random timestamp within last 30 days."""
    offset = random.randint(0, 30 * 24 * 3600)
    return datetime.now(timezone.utc) - timedelta(seconds=offset)


def make_square(lon: float = 0.0, lat: float = 0.0, side: float = SQUARE_1000_M2_SIDE) -> dict:
    """GeoJSON Polygon square with its south-west corner at (lon, lat)."""
    return {
        "type": "Polygon",
        "coordinates": [[
            [lon, lat],
            [lon + side, lat],
            [lon + side, lat + side],
            [lon, lat + side],
            [lon, lat],
        ]],
    }


def make_farm(farm_id: str = None, owner: str = None, **overrides) -> dict:
    """
    Build a stored farm document with randomized non-identity fields.

    Returns:
        dict suitable for Farm.model_validate(result)
    """
    suffix = _random_suffix()
    base = {
        "id": farm_id or str(uuid.uuid4()),
        "name": f"Farm {suffix}",
        "location": {
            "latitude": round(random.uniform(-60, 60), 4),
            "longitude": round(random.uniform(-170, 170), 4),
        },
        "owner": owner or f"user-{suffix}",
        "collaborators": [],
        "createdAt": _random_timestamp().isoformat(),
        "updatedAt": _random_timestamp().isoformat(),
    }
    base.update(overrides)
    return base


def make_block_input(**overrides) -> dict:
    """Block create payload: randomized name/variety, ~1000 m2 square geometry."""
    suffix = _random_suffix()
    base = {
        "name": f"Block {suffix}",
        "variety": random.choice(["Merlot", "Cabernet Sauvignon", "Semillon", "Malbec"]),
        "plantingYear": random.randint(1970, 2024),
        "geometry": make_square(),
    }
    base.update(overrides)
    return base


def make_dataset_input(**overrides) -> dict:
    """Dataset create payload with a random name."""
    base = {
        "name": f"Dataset {_random_suffix()}",
        "type": "csv",
        "description": f"Collected {_random_timestamp().date().isoformat()}",
    }
    base.update(overrides)
    return base


def make_point_csv(valid_rows: int = 10, missing_rows: int = 0, seed: int = None) -> bytes:
    """
    CSV with lat,lon,value columns.

    Valid rows sit in a small box around Bordeaux; missing rows have empty
    coordinates.
    """
    rng = random.Random(seed)
    lines = ["lat,lon,value"]
    for _ in range(valid_rows):
        lines.append(f"{44.80 + rng.random() * 0.05:.6f},{-0.60 + rng.random() * 0.05:.6f},{rng.randint(1, 100)}")
    for _ in range(missing_rows):
        lines.append(f",,{rng.randint(1, 100)}")
    return ("\n".join(lines) + "\n").encode("utf-8")


def make_feature_collection(values, field: str = "value") -> dict:
    """Point FeatureCollection whose features carry `field` = each value."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [float(i), float(i)]},
                "properties": {field: v},
            }
            for i, v in enumerate(values)
        ],
    }
