"""Example: Using the async client and icon cache."""

import asyncio

from dotenv import load_dotenv

from floormap import AsyncFloorMapClient, AsyncIconsCache, status_color


async def main():
    """Main async function."""
    load_dotenv()

    async with AsyncFloorMapClient() as client:
        print("=== Async Floor Map Example ===\n")

        # Fetch floors and locations
        print("1. Fetching floors...")
        floors = await client.get_floors()
        for floor in floors:
            print(f"  - {floor.code}: {floor.display_name}")

        print("\n2. Fetching locations on floor 5...")
        locations = await client.get_locations(floor="5")
        print(f"Found {len(locations)} locations")

        for location in locations[:5]:  # Show first 5 locations
            print(f"  {location.name or location.id} ({location.type}): {status_color(location)}")

        # Preload marker icons concurrently
        print("\n3. Preloading icons...")
        icons = AsyncIconsCache(client)
        icon_set = await icons.preload()
        print(f"Loaded {len(icon_set.all_icons())} icons")

        print("\n=== Done ===")


if __name__ == "__main__":
    asyncio.run(main())
