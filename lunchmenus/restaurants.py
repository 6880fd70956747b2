from typing import List, Optional

from lunchmenus.schemas import RestaurantDescriptor

RESTAURANTS: List[RestaurantDescriptor] = [
    RestaurantDescriptor(
        id="tellus",
        name="Tellus",
        location="Pitäjänmäki",
        description="Compass Group lunch restaurant",
        website="https://www.compass-group.fi/ravintolat-ja-ruokalistat/",
    ),
    RestaurantDescriptor(
        id="por",
        name="Pitäjänmäen Osuusruokala (POR)",
        location="Pitäjänmäki",
        description="Cooperative lunch restaurant with a weekly bilingual menu",
        website="https://por.fi/menu/",
    ),
    RestaurantDescriptor(
        id="valimo-park",
        name="Valimo Park",
        location="Valimotie",
        description="Faundori lunch buffet",
        website="https://ravintolapalvelut.iss.fi/valimo-park",
    ),
    RestaurantDescriptor(
        id="valaja",
        name="Valaja",
        location="Pitäjänmäki",
        description="Sodexo lunch restaurant",
        website="https://www.sodexo.fi/en/restaurants/restaurant-valaja",
    ),
    RestaurantDescriptor(
        id="factory",
        name="Factory Pitäjänmäki",
        location="Pitäjänmäki",
        description="Buffet lunch with soup and salad bar",
        website="https://ravintolafactory.com/lounasravintolat/ravintolat/helsinki-pitajanmaki/",
    ),
    RestaurantDescriptor(
        id="ravintola-valimo",
        name="Ravintola Valimo",
        location="Valimotie",
        description="Lunch buffet",
        website="https://www.ravintolavalimo.fi/",
    ),
]


def list_restaurants() -> List[RestaurantDescriptor]:
    return list(RESTAURANTS)


def get_restaurant(restaurant_id: str) -> Optional[RestaurantDescriptor]:
    return next((r for r in RESTAURANTS if r.id == restaurant_id), None)
