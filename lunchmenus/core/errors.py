class FetchError(Exception):
    """Upstream could not be fetched after all retry attempts."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url


class UnknownRestaurantError(LookupError):
    """Restaurant id has no registered scraper.

    This is a configuration error (directory and registry out of sync), so it
    is never converted into a fallback menu message.
    """

    def __init__(self, restaurant_id: str):
        super().__init__(f"Unknown restaurant: {restaurant_id}")
        self.restaurant_id = restaurant_id
