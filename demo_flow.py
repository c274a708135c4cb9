import asyncio

from dotenv import load_dotenv
load_dotenv("backend/.env")

from config import Configuration
from models import Budget, FilterState, Mood
from services.config_resolver import ConfigResolver
from services.location import StaticLocationProvider
from services.mock_data import REFERENCE_LOCATION
from services.session import DiscoverySession
from services.storage import JsonFileStore, StorageService
from utils import format_distance, haversine_km, maps_url, price_label


async def main():
    cfg = Configuration.from_env()
    resolver = ConfigResolver(cfg)
    status = resolver.config_status()

    print("=== Configuration ===")
    print(f"Mode: {resolver.mode().value}")
    print(f"Status: {'ok' if status.ok else 'needs attention'} - {status.message}")
    for issue in status.issues:
        print(f"  - {issue}")
    print()

    session = DiscoverySession(
        cfg,
        StaticLocationProvider(REFERENCE_LOCATION),
        StorageService(JsonFileStore(cfg.storage_path)),
    )
    filters = FilterState(radius_km=5, budget=Budget.MEDIUM, mood=Mood.ROMANTIC)

    print("=== Searching: food within 5 km, budget $$ ===")
    outcome = await session.search("food", filters)
    if not outcome.ok:
        print(f"Search failed ({outcome.kind}): {outcome.error}")
        return
    prefs = session.storage.get_preferences()
    use_miles = bool(prefs and prefs.use_miles)
    for p in outcome.value:
        km = haversine_km(REFERENCE_LOCATION.latitude, REFERENCE_LOCATION.longitude, p.lat, p.lng)
        print(f"- {p.name} ({format_distance(km, use_miles)}) rating={p.rating or '—'} price={price_label(p.price_level)}")
        print(f"  {maps_url(p.name, p.vicinity)}")
    print()

    print("=== Generating ideas ===")
    ideas = await session.generate(filters)
    if ideas.fallback:
        print(f"AI error ({ideas.kind}); showing fallback suggestions")
    for idea in ideas.value or ():
        cost = idea.estimated_cost.value if idea.estimated_cost else "?"
        print(f"* {idea.title} ({cost}, {idea.estimated_duration})")
        print(f"  {idea.description}")
        print(f"  places: {', '.join(idea.place_ids)}")
    print()

    if ideas.value:
        memory = await session.mark_done(ideas.value[0])
        print(f"Saved memory {memory.id} on {memory.date}")


if __name__ == "__main__":
    asyncio.run(main())
