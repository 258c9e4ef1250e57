import html
import os
import webbrowser
from typing import Optional, Sequence, Tuple
from urllib.parse import urlencode

import folium

from toilet_data import Facility

DIRECTIONS_URL = "https://www.google.com/maps/dir/"
DESTINATION_LABEL = "Public Toilet"


def directions_url(facility: Facility) -> str:
    """
    Walking directions to the facility, for the external maps application.
    """
    params = {
        "api": 1,
        "destination": f"{facility.latitude},{facility.longitude}",
        "travelmode": "walking",
    }
    return f"{DIRECTIONS_URL}?{urlencode(params)}"


def describe_facility(facility: Facility) -> str:
    """Plain text detail shown when a marker is selected."""
    return (
        f"Opening Hours: {facility.opening_hours}\n"
        f"Disabled Access: {facility.accessibility_info}\n"
        f"Baby Change: {facility.baby_change}\n"
        f"Charge Amount: {facility.charge_amount}"
    )


def _popup_html(facility: Facility) -> str:
    details = "<br>".join(html.escape(line) for line in describe_facility(facility).splitlines())
    return f"""
    <div style="width: 250px;">
        <h4>{html.escape(facility.name)}</h4>
        <p>{details}</p>
        <p><a href="{html.escape(directions_url(facility))}" title="{DESTINATION_LABEL}" target="_blank">Get Directions</a></p>
    </div>
    """


def create_toilet_map(
    toilets: Sequence[Facility],
    user_location: Optional[Tuple[float, float]] = None,
    zoom_start: int = 13,
) -> folium.Map:
    """
    Create a Folium map with a marker per toilet.

    The map is centred on the nearest toilet (the first one), or on the
    user's location when there are no toilets to show.
    """
    if toilets:
        center = [toilets[0].latitude, toilets[0].longitude]
    elif user_location is not None:
        center = list(user_location)
    else:
        center = [0.0, 0.0]

    m = folium.Map(location=center, zoom_start=zoom_start, tiles="OpenStreetMap")

    if user_location is not None:
        folium.Marker(
            list(user_location),
            tooltip="You are here",
            icon=folium.Icon(color="red", icon="user", prefix="fa"),
        ).add_to(m)

    for toilet in toilets:
        folium.Marker(
            [toilet.latitude, toilet.longitude],
            popup=folium.Popup(_popup_html(toilet), max_width=300),
            tooltip=toilet.name,
            icon=folium.Icon(color="blue", icon="restroom", prefix="fa"),
        ).add_to(m)

    return m


def save_and_open_map(map_obj, filename="toilet_map.html", open_browser=True):
    """
    Save the map to an HTML file and optionally open it in the default browser.
    """
    map_obj.save(filename)
    path = os.path.realpath(filename)
    if open_browser:
        webbrowser.open(f"file://{path}")
    return path


def open_directions(facility: Facility) -> bool:
    return webbrowser.open(directions_url(facility))
