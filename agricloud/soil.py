# agricloud/soil.py
import math

from .schemas import SoilSample

KNOWN_TEXTURES = (
    "Clay",
    "Sandy Clay",
    "Sandy Loam",
    "Silty Clay Loam",
    "Silt Loam",
    "Clay Loam",
    "Loam",
)


def classify_texture(sand: float, clay: float, silt: float) -> str:
    """
    USDA texture triangle, approximated. Rules are checked top to bottom and
    the first hit wins.
    """
    if clay >= 40:
        return "Clay"
    if sand >= 50 and clay >= 35:
        return "Sandy Clay"
    if sand >= 50:
        return "Sandy Loam"
    if silt >= 50 and clay >= 27:
        return "Silty Clay Loam"
    if silt >= 50:
        return "Silt Loam"
    # reaches the same label as the silt branch above through low sand
    if clay >= 27 and sand < 20:
        return "Silty Clay Loam"
    if clay >= 27:
        return "Clay Loam"
    return "Loam"


def texture_of(sample: SoilSample) -> str:
    return classify_texture(sample.sand, sample.clay, sample.silt)


def location_hash(lat: float, lon: float) -> float:
    return abs(math.sin(lat * lon))


def simulate_soil_sample(lat: float, lon: float) -> SoilSample:
    """
    Stand-in sample for coordinates the soil provider cannot serve.
    Depends only on (lat, lon) so reloads never flap.
    """
    h = location_hash(lat, lon)
    return SoilSample(
        ph=6.0 + h * 2,
        organic_matter=1.5 + h * 3,
        sand=30 + h * 40,
        silt=20 + h * 30,
        clay=15 + h * 25,
        nitrogen=1.0 + h * 3,
        bulk_density=1.1 + h * 0.3,
        simulated=True,
    )
