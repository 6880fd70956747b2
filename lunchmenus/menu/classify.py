import re

# Vendor diet codes (L, G, VEG, VS...) are passed through verbatim. Dish type
# comes from keywords only, since the same letter means different things at
# different vendors.

FI_MEAT = re.compile(r"\b(nauta|naudan|sika|porsas|possu|kassler|kana|broileri|kebab|makkara|liha|jauheliha)\b", re.I)
FI_FISH = re.compile(r"\b(lohi|kirjolohi|muikku|silakka|tonnikala|katkarapu|seiti|hauki|ahven|siika|savulohi)\b", re.I)
FI_VEGAN = re.compile(r"\b(vegaani(?:nen)?|veg\.?)(?!\w)", re.I)
FI_VEGETARIAN = re.compile(r"\b(kasvis|vegetaar|vegetar)", re.I)

EN_MEAT = re.compile(r"\b(beef|pork|chicken|sausage|kebab|meatball|ham|bacon)\b", re.I)
EN_FISH = re.compile(r"\b(salmon|trout|whitefish|tuna|shrimp|prawn|mackerel|herring|fish)\b", re.I)
EN_VEGAN = re.compile(r"\b(vegan)\b", re.I)
EN_VEGETARIAN = re.compile(r"\b(vegetarian|veggie)\b", re.I)

# Plant proteins imply vegan even without a label
PLANT_PROTEIN = re.compile(r"\b(tofu|seitan|nyhtökaura|härkis|soija)\b", re.I)

DIET_GROUP_RE = re.compile(r"[\[(（]([A-Za-zÄÖÅäöå ,\-/+]+)[\])）]")
_TOKEN_SPLIT_RE = re.compile(r"[,\s/+]+")

DISH_TYPES = ("vegan", "vegetarian", "fish", "meat", "unknown")


def classify_dish_type(name: str) -> str:
    """
    Heuristic dish type: vegan > vegetarian > fish > meat > unknown.

    The first matching class wins, so a combo dish with both a plant protein
    and a meat keyword is reported as vegan.
    """
    s = name or ""
    if FI_VEGAN.search(s) or EN_VEGAN.search(s) or PLANT_PROTEIN.search(s):
        return "vegan"
    if FI_VEGETARIAN.search(s) or EN_VEGETARIAN.search(s):
        return "vegetarian"
    if FI_FISH.search(s) or EN_FISH.search(s):
        return "fish"
    if FI_MEAT.search(s) or EN_MEAT.search(s):
        return "meat"
    return "unknown"


def extract_diet_codes(line: str) -> list[str]:
    """
    Collect uppercased tokens from bracket/paren groups, e.g. '(L, G)' or '[VL]'.

    Tokens are de-duplicated in first-seen order; their meaning is not
    interpreted.
    """
    tokens: list[str] = []
    for group in DIET_GROUP_RE.findall(line or ""):
        for token in _TOKEN_SPLIT_RE.split(group):
            token = token.strip().upper()
            if token and token not in tokens:
                tokens.append(token)
    return tokens
