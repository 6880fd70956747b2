from pydantic import BaseModel, Field
from typing import List, Literal, Optional

Language = Literal["fi", "en"]
DishType = Literal["vegan", "vegetarian", "fish", "meat", "unknown"]

class RestaurantDescriptor(BaseModel):
    id: str = Field(description="Stable slug, also the scraper registry key")
    name: str
    location: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None

class CacheEntry(BaseModel):
    restaurant_id: str
    restaurant_name: Optional[str] = None
    language: Language
    date: str = Field(description="Helsinki calendar date, YYYY-MM-DD")
    raw_menu: str
    parsed_menu: str
    scraped_at: Optional[str] = None

class MenuResult(BaseModel):
    raw_menu: str
    parsed_menu: str
    from_cache: bool

class NormalizedItem(BaseModel):
    name: str
    diet_codes: List[str] = Field(default_factory=list, description="Vendor diet codes, verbatim")
    type: DishType = "unknown"

class NormalizedMenu(BaseModel):
    restaurant_id: str
    restaurant_name: str
    day_key: str
    language: Language
    items: List[NormalizedItem]
    source: Literal["api", "html", "rss", "ai-html"]

# AI adapter outputs. Never trusted as final: callers re-validate.

class DayMenuExtraction(BaseModel):
    success: bool
    target_day_menu: List[str] = Field(default_factory=list)
    error: Optional[str] = None

class ParsedMenu(BaseModel):
    parsed_menu: str

class MenuTranslation(BaseModel):
    success: bool
    translated_menu: Optional[str] = None
    error: Optional[str] = None

# Request layer

class MenuStatus(BaseModel):
    scraped: bool
    note: str

class RestaurantMenu(BaseModel):
    id: str
    name: str
    location: Optional[str] = None
    description: Optional[str] = None
    raw_snippet: Optional[str] = None
    parsed_menu: Optional[str] = None
    from_cache: bool = False
    error: bool = False
    status: MenuStatus

class MenusResponse(BaseModel):
    language: Language
    date_key: str
    target_day: str
    restaurants: List[RestaurantMenu]
