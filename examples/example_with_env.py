"""Example: Rendering a floor's markers using environment variables for the server URL."""

import os

from dotenv import load_dotenv

from floormap import FloorMapClient, FloorMapView, ImageCache

# Load environment variables from .env file
load_dotenv()

if not os.getenv("FLOORMAP_BASE_URL"):
    print("Error: FLOORMAP_BASE_URL environment variable must be set")
    print("\nCreate a .env file with:")
    print("FLOORMAP_BASE_URL=https://map.example.com")
    exit(1)

with FloorMapClient() as client:
    print("=== Floor Map ===\n")

    # Pick the first public floor
    print("1. Getting floors...")
    floors = client.get_floors(public_only=True)
    print(f"Found {len(floors)} public floors")
    if not floors:
        exit(0)
    floor = floors[0]

    # Load its locations and plan image
    print(f"\n2. Loading floor {floor.display_name}...")
    view = FloorMapView(1280, 800, on_items=lambda items: print(f"Drew {len(items)} items"))
    view.set_locations(client.get_locations(floor=floor.code))
    if floor.image_url:
        view.load_floor_image(floor.image_url, ImageCache(client))

    # Full scale: one marker per location
    print("\n3. Rendering at 100%...")
    surface = view.refresh()

    # Zoomed out: nearby markers merge into clusters
    print("\n4. Rendering at 30%...")
    view.zoom_to(0.3)
    surface = view.refresh()
    if surface is not None:
        surface.save("floor_markers.png")
        print("Saved floor_markers.png")

    print("\n=== Done ===")
