"""Local sample data used when no backend is configured."""

from __future__ import annotations

from typing import Tuple

from models import Budget, Coordinate, Idea, Place


# Berlin Mitte; every seed place is placed relative to it.
REFERENCE_LOCATION = Coordinate(52.5200, 13.4050)

SEED_PLACES: Tuple[Place, ...] = (
    Place(
        id="ber-1",
        name="Café Himmel",
        lat=52.5215,
        lng=13.4090,
        types=("cafe", "restaurant", "food"),
        rating=4.6,
        user_ratings_total=412,
        price_level=1,
        vicinity="Rosenthaler Str. 12, Berlin",
        open_now=True,
    ),
    Place(
        id="ber-2",
        name="Tiergarten Loop",
        lat=52.5145,
        lng=13.3501,
        types=("park", "point_of_interest"),
        rating=4.7,
        user_ratings_total=2310,
        vicinity="Großer Tiergarten, Berlin",
        open_now=True,
    ),
    Place(
        id="ber-3",
        name="Neues Museum",
        lat=52.5206,
        lng=13.3977,
        types=("museum", "tourist_attraction", "point_of_interest"),
        rating=4.6,
        user_ratings_total=18002,
        price_level=2,
        vicinity="Bodestraße 1-3, Berlin",
        open_now=False,
    ),
    Place(
        id="ber-4",
        name="Skyview Terrace",
        lat=52.5208,
        lng=13.4094,
        types=("tourist_attraction", "point_of_interest"),
        rating=4.4,
        user_ratings_total=9120,
        vicinity="Panoramastraße 1A, Berlin",
    ),
    Place(
        id="ber-5",
        name="Lucky Strike Lanes",
        lat=52.5076,
        lng=13.4201,
        types=("bowling_alley", "point_of_interest"),
        rating=4.2,
        user_ratings_total=860,
        price_level=2,
        vicinity="Köpenicker Str. 40, Berlin",
        open_now=True,
    ),
    Place(
        id="ber-6",
        name="Spree Riverside Walk",
        lat=52.5170,
        lng=13.4020,
        types=("park", "natural_feature"),
        rating=4.5,
        user_ratings_total=1504,
        vicinity="Spreeufer, Berlin",
    ),
    Place(
        id="ber-7",
        name="Sweet Treats",
        lat=52.5250,
        lng=13.4120,
        types=("bakery", "dessert", "food"),
        rating=4.8,
        user_ratings_total=275,
        price_level=1,
        vicinity="Torstraße 88, Berlin",
        open_now=True,
    ),
    Place(
        id="ber-8",
        name="Velvet Jazz Bar",
        lat=52.5290,
        lng=13.4010,
        types=("bar", "night_club", "point_of_interest"),
        rating=4.3,
        user_ratings_total=640,
        price_level=3,
        vicinity="Linienstraße 40, Berlin",
        open_now=False,
    ),
    Place(
        id="ber-9",
        name="Nachtigall Dining",
        lat=52.5235,
        lng=13.4150,
        types=("restaurant", "food", "point_of_interest"),
        rating=4.5,
        user_ratings_total=980,
        price_level=3,
        vicinity="Alte Schönhauser Str. 5, Berlin",
        open_now=True,
    ),
    Place(
        id="ber-10",
        name="Strandbad Wannsee",
        lat=52.4380,
        lng=13.1790,
        types=("natural_feature", "campground", "point_of_interest"),
        rating=4.1,
        user_ratings_total=5321,
        price_level=1,
        vicinity="Wannseebadweg 25, Berlin",
    ),
)


# Shown when the live idea service fails.
FALLBACK_IDEAS: Tuple[Idea, ...] = (
    Idea(
        title="Dessert & Stroll",
        description="Share something sweet at Sweet Treats, then walk it off along the Spree.",
        place_ids=("ber-7", "ber-6"),
        estimated_cost=Budget.LOW,
        estimated_duration="2-3 hours",
    ),
    Idea(
        title="Museum Afternoon",
        description="Explore the Neues Museum and pick a favourite piece each.",
        place_ids=("ber-3",),
        estimated_cost=Budget.MEDIUM,
        estimated_duration="2 hours",
    ),
    Idea(
        title="Strike Night",
        description="A few rounds at Lucky Strike Lanes, loser buys the drinks.",
        place_ids=("ber-5",),
        estimated_cost=Budget.MEDIUM,
        estimated_duration="1-2 hours",
    ),
)
