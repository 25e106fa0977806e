"""
Category catalogs for bills, transactions and incomes.

Each member's value is a stable slug used for storage and as the key of goal
classification maps. ``label`` is the display string (with its emoji glyph)
and ``display_name`` is the label without the glyph.
"""

from __future__ import annotations

from enum import Enum


class LabeledEnum(str, Enum):
    """String enum whose members carry a separate display label."""

    def __new__(cls, value: str, label: str):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.label = label
        return obj

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        head, _, tail = self.label.partition(" ")
        if tail and not head[:1].isalnum():
            return tail
        return self.label

    @classmethod
    def parse(cls, raw: "str | LabeledEnum"):
        """Resolve a slug, member name, legacy label or display name to a member.

        Legacy rows stored the emoji label itself, so those keep resolving.
        """

        if isinstance(raw, cls):
            return raw
        text = str(raw).strip()
        folded = text.casefold()
        for member in cls:
            if text == member.label:
                return member
            if folded in (member.value, member.name.casefold(), member.display_name.casefold()):
                return member
        raise ValueError(f"Unknown {cls.__name__}: {raw!r}")


class BillCategory(LabeledEnum):
    UNCATEGORIZED = ("uncategorized", "Uncategorized")
    HOUSING = ("housing", "🏡 Housing")
    UTILITIES = ("utilities", "💡 Utilities")
    TRANSPORTATION = ("transportation", "🚗 Transportation")
    INSURANCE = ("insurance", "🛡️ Insurance")
    SUBSCRIPTIONS = ("subscriptions", "📦 Subscriptions")
    GROCERIES = ("groceries", "🛒 Groceries")
    PHONE = ("phone", "📱 Phone")
    INTERNET = ("internet", "🌐 Internet")
    MEDICAL = ("medical", "💊 Medical")
    DEBT = ("debt", "💳 Debt")
    CHILDCARE = ("childcare", "🧒 Childcare")
    EDUCATION = ("education", "🎓 Education")
    ENTERTAINMENT = ("entertainment", "🎮 Entertainment")
    SAVINGS = ("savings", "💰 Savings")
    DONATIONS = ("donations", "🙏 Donations")
    PERSONAL_CARE = ("personal_care", "🧴 Personal Care")
    PETS = ("pets", "🐾 Pets")
    TRAVEL = ("travel", "✈️ Travel")
    TAXES = ("taxes", "🧾 Taxes")
    OTHER = ("other", "📁 Other")


class TransactionCategory(LabeledEnum):
    UNCATEGORIZED = ("uncategorized", "Uncategorized")
    GROCERIES = ("groceries", "🛒 Groceries")
    DINING_OUT = ("dining_out", "🍽️ Dining Out")
    COFFEE = ("coffee", "☕ Coffee")
    BARS = ("bars", "🍻 Bars & Alcohol")
    FAST_FOOD = ("fast_food", "🍔 Fast Food")
    SNACKS = ("snacks", "🍫 Snacks")
    CLOTHING = ("clothing", "👕 Clothing")
    SHOES = ("shoes", "👟 Shoes")
    ACCESSORIES = ("accessories", "👜 Accessories")
    ELECTRONICS = ("electronics", "💻 Electronics")
    BOOKS = ("books", "📚 Books")
    HOBBIES = ("hobbies", "🎨 Hobbies")
    GIFTS = ("gifts", "🎁 Gifts")
    HOME_DECOR = ("home_decor", "🛋️ Home Decor")
    ENTERTAINMENT = ("entertainment", "🎮 Entertainment")
    EVENTS = ("events", "🎫 Events & Tickets")
    MOVIES = ("movies", "🎬 Movies")
    MUSIC = ("music", "🎵 Music")
    GAMES = ("games", "🕹️ Games")
    TRAVEL = ("travel", "✈️ Travel")
    FLIGHT = ("flight", "🛫 Flight")
    HOTEL = ("hotel", "🏨 Hotel")
    TAXI = ("taxi", "🚕 Taxi / Ride Share")
    PUBLIC_TRANSPORT = ("public_transport", "🚌 Public Transport")
    FUEL = ("fuel", "⛽ Fuel")
    PARKING = ("parking", "🅿️ Parking")
    TOLLS = ("tolls", "🛣️ Tolls")
    PET_SUPPLIES = ("pet_supplies", "🐾 Pet Supplies")
    VET = ("vet", "🩺 Vet Visits")
    PHARMACY = ("pharmacy", "🧪 Pharmacy")
    DOCTOR_VISIT = ("doctor_visit", "🩻 Doctor Visit")
    THERAPY = ("therapy", "🧠 Therapy")
    PERSONAL_CARE = ("personal_care", "🧴 Personal Care")
    HAIR = ("hair", "💇 Hair")
    BEAUTY = ("beauty", "💅 Beauty & Nails")
    SPA = ("spa", "🧖 Spa & Wellness")
    SPORTS = ("sports", "🏈 Sports")
    FITNESS = ("fitness", "🏋️ Gym & Fitness")
    STATIONERY = ("stationery", "✏️ Stationery")
    CLEANING = ("cleaning", "🧽 Cleaning Supplies")
    HARDWARE = ("hardware", "🔩 Hardware / Tools")
    DONATIONS = ("donations", "🙏 Donations")
    MISCELLANEOUS = ("miscellaneous", "📁 Miscellaneous")


class IncomeCategory(LabeledEnum):
    SALARY = ("salary", "💰 Salary")
    FREELANCE = ("freelance", "💼 Freelance")
    INVESTMENTS = ("investments", "📈 Investments")
    RENTAL = ("rental", "🏠 Rental")
    BUSINESS = ("business", "🏢 Business")
    SIDE_HUSTLE = ("side_hustle", "🎯 Side Hustle")
    GIFTS = ("gifts", "🎁 Gifts")
    OTHER = ("other", "📁 Other")


# Display names seeded by auto-classification (string equality on display_name)
AUTO_NEED_NAMES = frozenset(
    {"Housing", "Utilities", "Groceries", "Healthcare", "Insurance", "Transportation", "Education"}
)
AUTO_WANT_NAMES = frozenset(
    {"Entertainment", "Dining Out", "Shopping", "Travel", "Hobbies", "Fitness"}
)
