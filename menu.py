from decimal import Decimal, ROUND_HALF_UP

CURRENCY = "€"

FOOD_DESCRIPTIONS = {
    "sushi roll": "Sushi rolls include rice, seaweed, and fillings like avocado, cucumber, or fish.",
    "sashimi": "Sashimi is thinly sliced raw fish, served without rice.",
    "nigiri": "Nigiri is raw fish pressed on rice.",
    "miso soup": "Miso soup contains fermented soybean paste, tofu, and seaweed.",
    "tempura": "Tempura is deep-fried shrimp or veggies.",
    "mochi": "A rice cake dessert, usually filled with ice cream.",
    "edamame": "Steamed soybeans, vegan and gluten-free.",
    "green tea": "Traditional Japanese green tea.",
}

PRICES = {
    "sushi roll": 4.5,
    "sashimi": 6,
    "nigiri": 2.5,
    "miso soup": 3,
    "tempura": 7,
    "mochi": 3.5,
    "edamame": 3,
    "green tea": 2,
}

KNOWN_ITEMS = list(FOOD_DESCRIPTIONS)

# Order matters: ties on length go to the earlier entry
KNOWN_INGREDIENTS = [
    "wasabi", "ginger", "pickled ginger", "gari", "soy sauce",
    "soy", "mayo", "spicy mayo", "chili", "sugar",
]


def is_menu_item(item):
    return item in PRICES


def price_of(item):
    return PRICES[item]


def describe_food(item):
    return FOOD_DESCRIPTIONS.get(item)


def round_money(amount):
    """Round half-up to cents using the exact value of the float."""
    return float(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_money(amount):
    return f"{CURRENCY}{round_money(amount):.2f}"


def menu_listing():
    return ", ".join(f"{item} ({format_money(PRICES[item])})" for item in KNOWN_ITEMS)
