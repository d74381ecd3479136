from __future__ import annotations

from .models import Restaurant

FEATURED_RESTAURANTS: list[Restaurant] = [
    Restaurant(
        id="1",
        name="Le Bernardin",
        cuisine="French",
        price_range="$$$",
        neighborhood="Midtown",
        description="Upscale French seafood restaurant with elegant atmosphere",
        rating=4.8,
        address="155 W 51st St, New York, NY 10019",
    ),
    Restaurant(
        id="2",
        name="Katz's Delicatessen",
        cuisine="Deli",
        price_range="$$",
        neighborhood="Lower East Side",
        description="Famous deli known for pastrami sandwiches",
        rating=4.6,
        address="205 E Houston St, New York, NY 10002",
    ),
    Restaurant(
        id="3",
        name="Carbone",
        cuisine="Italian",
        price_range="$$$",
        neighborhood="Greenwich Village",
        description="Upscale Italian-American restaurant with retro vibes",
        rating=4.7,
        address="181 Thompson St, New York, NY 10012",
    ),
    Restaurant(
        id="4",
        name="Peter Luger",
        cuisine="Steakhouse",
        price_range="$$$",
        neighborhood="Williamsburg",
        description="Iconic steakhouse serving dry-aged beef since 1887",
        rating=4.5,
        address="178 Broadway, Brooklyn, NY 11211",
    ),
    Restaurant(
        id="5",
        name="Cosme",
        cuisine="Mexican",
        price_range="$$$",
        neighborhood="Flatiron District",
        description="Modern Mexican restaurant with creative dishes",
        rating=4.6,
        address="35 E 21st St, New York, NY 10010",
    ),
]
