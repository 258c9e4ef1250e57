import argparse
import logging

import requests

from data_source import DEFAULT_DATA_URL, fetch_table, read_csv_table
from geocoding import geocode_address
from map_visualization import create_toilet_map, open_directions, save_and_open_map
from nearest_toilet import DEFAULT_COUNT, any_facility, requires_baby_change
from toilet_data import FetchError
from toilet_finder import ToiletFinder


def format_distance(meters):
    if meters >= 1000:
        return f"{meters/1000:.2f} km"
    return f"{int(meters)} m"


def build_parser():
    parser = argparse.ArgumentParser(description="Find the nearest public toilets.")
    parser.add_argument("--lat", type=float, help="Latitude of your location")
    parser.add_argument("--lon", type=float, help="Longitude of your location")
    parser.add_argument("--address", help="Address to search from instead of --lat/--lon")
    parser.add_argument("--count", type=int, default=DEFAULT_COUNT, help="How many toilets to list")
    parser.add_argument("--any", action="store_true", help="Include toilets without baby change")
    parser.add_argument("--url", default=DEFAULT_DATA_URL, help="JSON table endpoint")
    parser.add_argument("--csv", help="Read a CSV file or URL directly instead of --url")
    parser.add_argument("--map", metavar="FILE", help="Save an HTML map of the results")
    parser.add_argument("--open", action="store_true", help="Open the saved map in a browser")
    parser.add_argument("--directions", type=int, metavar="N",
                        help="Open walking directions to result number N")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.count < 0:
        parser.error("--count must not be negative")

    if args.address:
        try:
            result = geocode_address(args.address)
        except (requests.RequestException, ValueError, KeyError) as e:
            print(f"Could not look up address: {e}")
            return 1
        if result is None:
            print("Address not found.")
            return 1
        print(f"Searching from: {result['display_name']}")
        lat, lon = result["lat"], result["lon"]
    elif args.lat is not None and args.lon is not None:
        lat, lon = args.lat, args.lon
    else:
        parser.error("give --address or both --lat and --lon")

    predicate = any_facility if args.any else requires_baby_change

    fetch = fetch_table
    if args.csv:
        def fetch(url, timeout=None):
            try:
                return read_csv_table(args.csv)
            except (OSError, ValueError) as e:
                raise FetchError(f"Could not read {args.csv}: {e}") from e

    finder = ToiletFinder(data_url=args.url, count=args.count, predicate=predicate, fetch=fetch)
    outcome = finder.refresh(lat, lon)
    if not outcome.ok:
        print(f"Error ({outcome.status}): {outcome.error}")
        return 1

    print("Public Toilet Finder")
    print("====================")
    print(f"Loaded {len(finder.toilets)} toilets ({outcome.skipped_rows} rows skipped)")
    if not finder.nearest:
        print("No matching toilets found.")
    for i, (toilet, meters) in enumerate(finder.ranked, 1):
        print(f"\n{i}. {toilet.name} - {format_distance(meters)}")
        print(f"   Opening hours: {toilet.opening_hours}")
        print(f"   Accessible: {toilet.accessibility_info}")
        print(f"   Baby change: {toilet.baby_change}")
        if toilet.charge_amount:
            print(f"   Charge: {toilet.charge_amount}")

    if args.map:
        toilet_map = create_toilet_map(finder.nearest, user_location=(lat, lon))
        path = save_and_open_map(toilet_map, args.map, open_browser=args.open)
        print(f"\nMap saved as {path}")

    if args.directions is not None:
        if not 1 <= args.directions <= len(finder.nearest):
            print(f"No result number {args.directions} to get directions to.")
            return 1
        toilet = finder.nearest[args.directions - 1]
        print(f"\nOpening directions to {toilet.name}...")
        open_directions(toilet)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
