# models.py
import os

DATA_DIR = os.environ.get("DATA_DIR", "data")

TRIPS_JSON_PATH = os.path.join(DATA_DIR, "fishing_trips.json")
SETTINGS_JSON_PATH = os.path.join(DATA_DIR, "boat_settings.json")
ID_MAP_JSON_PATH = os.path.join(DATA_DIR, "trip_id_map.json")

# remote tables
TRIPS_TABLE = "fishing_trips"
SETTINGS_TABLE = "user_settings"
SUBSCRIPTIONS_TABLE = "push_subscriptions"

TRIP_TYPES = [
    "Private Hire",
    "Yellow Fin Tuna",
    "Reef Fish",
    "Kalhubilamas",
    "Latti/Raagondi",
]

HIRE_DURATIONS = ["Full Day", "Half Day", "Night Fishing"]

FISH_TYPES = ["Fresh", "Iced"]

EXPENSE_KEYS = ["fuel", "food", "other"]

# local trip key -> fishing_trips column
TRIP_FIELD_MAP = {
    # identifiers
    "id": "id",
    "date": "date",

    # crew + costs
    "crew": "crew",
    "expenses": "expenses",

    # sales + trip context (JSON columns)
    "fishSales": "fish_sales",
    "tripType": "trip_type",
    "hireDetails": "hire_details",
    "weatherConditions": "weather_conditions",

    # aggregates (numeric columns, may come back as strings)
    "totalCatch": "total_catch",
    "totalSales": "total_sales",
    "ownerSharePercent": "owner_share_percent",

    # save-time snapshot of the profit split
    "profit": "profit",
    "profitPerCrew": "profit_per_crew",
    "ownerProfit": "owner_profit",
}

TRIP_NUMERIC_FIELDS = [
    "totalCatch",
    "totalSales",
    "profit",
    "ownerSharePercent",
    "profitPerCrew",
    "ownerProfit",
]

# local settings key -> user_settings column
SETTINGS_FIELD_MAP = {
    "boatName": "boat_name",
    "ownerName": "owner_name",
    "contactNumber": "contact_number",
    "email": "email",
    "address": "address",
    "registrationNumber": "registration_number",
    "logoUrl": "logo_url",
    "bankName": "bank_name",
    "accountNumber": "account_number",
    "accountName": "account_name",
}


def empty_expenses():
    return {k: 0 for k in EXPENSE_KEYS}


def default_settings():
    """Blank boat settings; `logoUrl` is optional and left out."""
    return {k: "" for k in SETTINGS_FIELD_MAP if k != "logoUrl"}


def empty_summary():
    return {
        "totalTrips": 0,
        "totalCatch": 0,
        "totalSales": 0,
        "totalProfit": 0,
        "averageProfit": 0,
    }
