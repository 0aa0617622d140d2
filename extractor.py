import logging
import math
import re
from datetime import datetime

from word2number import w2n

import config
from fuzzer import MenuFuzzer
from menu import KNOWN_INGREDIENTS, KNOWN_ITEMS
from models import ExtractedParams, ModifierAction

logger = logging.getLogger(__name__)

QUANTITY_KEYS = ("quantity", "number", "amount", "qty")
FOOD_KEYS = ("food_item", "item")
ACTION_KEYS = ("action", "modifier")
INGREDIENT_KEYS = ("ingredient", "ingredients")
NAME_KEYS = ("name", "person", "given-name", "given_name")
TABLE_KEYS = ("table", "table_number", "table-number", "number")
PICKUP_TIME_KEYS = ("pickup_time", "pickup-time", "time", "date-time", "date_time")

# Keyword families for modifier polarity, first match wins
ACTION_RULES = [
    (re.compile(r"\b(?:no|without|hold|skip|remove)\b"), ModifierAction.NO),
    (re.compile(r"\b(?:extra|add more|double)\b"), ModifierAction.EXTRA),
    (re.compile(r"\b(?:less|light|easy on|not too much)\b"), ModifierAction.LESS),
]

NAME_PATTERN = re.compile(
    r"\b(?:my name is|name is|name's|call me|under the name|under)\s+"
    r"([a-z][a-z'\-]*)",
    re.IGNORECASE,
)
TABLE_PATTERN = re.compile(r"\btable\s*(?:number|no\.?|#)?\s*(\d+)", re.IGNORECASE)
BARE_NUMBER_PATTERN = re.compile(r"^\s*(?:number\s*|#\s*)?(\d+)\s*$", re.IGNORECASE)
TIME_12H_PATTERN = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b", re.IGNORECASE)
TIME_24H_PATTERN = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")

# Shared typo corrector for the last food fallback
fuzzer = MenuFuzzer(KNOWN_ITEMS, KNOWN_INGREDIENTS, debug=config.DEBUG)


def _first_value(params, keys):
    """Return the first usable value among the alias keys.

    Array values contribute their first element. Empty strings, empty lists
    and zero count as absent so the next alias is tried.
    """
    for key in keys:
        value = params.get(key)
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value in (None, "", 0):
            continue
        return value
    return None


def _normalize_number(number):
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def coerce_number(value):
    """Coerce a parameter value to a finite number, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            # Spelled-out quantities like "two"
            try:
                number = w2n.word_to_num(text)
            except ValueError:
                return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return _normalize_number(number)


def parse_quantity(params, default=1):
    # Zero counts as absent whether it arrives as 0 or "0"
    for key in QUANTITY_KEYS:
        number = coerce_number(_first_value(params, (key,)))
        if number is not None and number != 0:
            return number
    return default


## Food fallback chain ##

def _food_from_params(params, text):
    value = _first_value(params, FOOD_KEYS)
    if value is None:
        return ""
    return str(value).lower().strip()


def _food_by_substring(params, text):
    for item in KNOWN_ITEMS:
        if item in text:
            return item
    return ""


def _food_by_suffix_word(params, text):
    # Catches utterances that drop a leading qualifier ("two rolls")
    for item in KNOWN_ITEMS:
        last = item.split()[-1]
        if re.search(rf"\b{re.escape(last)}s?\b", text):
            return item
    return ""


def _food_by_fuzzy_match(params, text):
    if not config.FUZZY_MATCHING:
        return ""
    corrected, corrections = fuzzer.correct_text(re.sub(r"[^\w\s]", " ", text))
    if not corrections:
        return ""
    if config.DEBUG:
        logger.debug(f"Retrying food match on corrected text: {corrected}")
    return _food_by_substring(params, corrected) or _food_by_suffix_word(params, corrected)


FOOD_FALLBACKS = [
    ("parameter", _food_from_params),
    ("substring", _food_by_substring),
    ("suffix_word", _food_by_suffix_word),
    ("fuzzy", _food_by_fuzzy_match),
]


def parse_food(params, text):
    text = (text or "").lower()
    for name, resolve in FOOD_FALLBACKS:
        food = resolve(params, text)
        if food:
            if config.DEBUG:
                logger.debug(f"Food '{food}' resolved by {name}")
            return food
    return ""


def classify_action(text):
    for pattern, action in ACTION_RULES:
        if pattern.search(text):
            return action.value
    return None


def parse_action(params, text):
    value = _first_value(params, ACTION_KEYS)
    if value is not None:
        action = classify_action(str(value).lower())
        if action:
            return action
    return classify_action((text or "").lower())


def parse_ingredient(params, text):
    value = _first_value(params, INGREDIENT_KEYS)
    if value is not None:
        return str(value).lower().strip()

    text = (text or "").lower()
    matches = [ingredient for ingredient in KNOWN_INGREDIENTS if ingredient in text]
    if not matches:
        return None
    # Longest wins; max() keeps the first of equal-length matches
    return max(matches, key=len)


def extract_params(params, text, quantity_default=1):
    params = params or {}
    text = (text or "").lower()
    return ExtractedParams(
        quantity=parse_quantity(params, default=quantity_default),
        food=parse_food(params, text),
        action=parse_action(params, text),
        ingredient=parse_ingredient(params, text),
    )


## Guest details ##

def parse_name(params, text):
    value = _first_value(params, NAME_KEYS)
    if isinstance(value, dict):
        # @sys.person arrives as {"name": "..."}
        value = value.get("name")
    if value:
        return str(value).strip()

    match = NAME_PATTERN.search(text or "")
    if match:
        return " ".join(w.capitalize() for w in match.group(1).split())
    return None


def parse_table(params, text):
    value = _first_value(params, TABLE_KEYS)
    if value is not None:
        number = coerce_number(value)
        if number is not None:
            return str(number)
        return str(value).strip()

    text = text or ""
    match = TABLE_PATTERN.search(text) or BARE_NUMBER_PATTERN.match(text)
    if match:
        return match.group(1)
    return None


def _format_clock(value):
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%H:%M")


def parse_pickup_time(params, text):
    value = _first_value(params, PICKUP_TIME_KEYS)
    if isinstance(value, dict):
        # date-time objects: {"date_time": ...} or {"startDateTime": ...}
        value = next((v for v in value.values() if isinstance(v, str) and v), None)
    if value:
        return _format_clock(str(value).strip())

    text = text or ""
    match = TIME_12H_PATTERN.search(text)
    if match:
        minute = match.group(2) or "00"
        return f"{int(match.group(1))}:{minute} {match.group(3).upper()}"
    match = TIME_24H_PATTERN.search(text)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"
    return None
