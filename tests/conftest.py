import pytest

from toilet_data import Facility

HEADER = ["Location", "Latitude", "Longitude", "Opening hours", "Accessible", "Baby change", "Charge amount"]

# Halifax town centre
REFERENCE = (53.7248, -1.8658)

# roughly 111.2 km per degree of latitude
METERS_PER_DEG_LAT = 111195.08


def toilet_north_of(reference, meters, name, baby_change="Yes"):
    lat, lon = reference
    return Facility(
        name=name,
        latitude=lat + meters / METERS_PER_DEG_LAT,
        longitude=lon,
        opening_hours="8am - 6pm",
        accessibility_info="Yes",
        baby_change=baby_change,
    )


@pytest.fixture
def sample_table():
    return [
        HEADER,
        ["Piece Hall", "53.7217", "-1.8592", "10am - 6pm", "Yes", "Yes", "Free"],
        ["Bus Station", "53.7211", "-1.8571", "7am - 7pm", "Yes", "No", "20p"],
        ["Shibden Park", "53.7297", "-1.8331", "Dawn - dusk", "No", "YES", ""],
    ]
