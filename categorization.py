"""Category classification and color lookup for money-flow records."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

import pandas as pd


OTHER_INCOME = "Other Income"
OTHER_EXPENSES = "Other Expenses"
HUB_NAME = "Budget"

CANONICAL_CATEGORIES = (
    "Income",
    "Housing",
    "Food",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Healthcare",
    "Travel",
    "Utilities",
    "Education",
    "Taxes",
    "Gifts",
    "Savings",
    "Other",
)

INCOME_KEYWORDS = (
    "Income",
    "Salary",
    "Wages",
    "Bonus",
    "Interest",
    "Dividend",
    "Gift Received",
    "Refund",
    "Cashback",
    "Deposit",
    "Payment Received",
    "Tax Return",
    "Royalty",
    "Reimbursement",
    "Commission",
    "Pension",
    "Social Security",
    "Paycheck",
    "Revenue",
)

# Whole-string aliases, checked before the keyword table.
EXPENSE_ALIASES = (
    (r"food|food & dining|dining|groceries|restaurants|eating out", "Food"),
    (r"home|housing|rent|mortgage", "Housing"),
    (r"transport|transportation|car|auto|gas|fuel", "Transportation"),
    (r"shop|shopping|clothes|clothing|merchandise", "Shopping"),
    (r"fun|entertainment|recreation", "Entertainment"),
    (r"health|healthcare|medical|doctor", "Healthcare"),
    (r"trip|travel|vacation|flights|hotels", "Travel"),
    (r"utilities|bills|services", "Utilities"),
    (r"school|education|learning|tuition", "Education"),
    (r"tax|taxes|taxation", "Taxes"),
    (r"gift|gifts|donation|donate|charity", "Gifts"),
    (r"save|savings|invest|investment", "Savings"),
)

DEFAULT_KEYWORD_MAP = {
    "Housing": [
        "Rent", "Mortgage", "Housing", "Utilities", "Electric", "Electricity", "Water", "Gas",
        "Internet", "Cable", "Home", "Property Tax", "HOA", "Maintenance", "Repairs",
        "Real Estate", "Furniture", "Appliance", "Home Improvement", "Home Insurance",
    ],
    "Food": [
        "Food", "Groceries", "Dining", "Restaurant", "Restaurants", "Coffee", "Takeout",
        "Fast Food", "Cafe", "Meal", "Snack", "Delivery", "Doordash", "Uber Eats",
        "Breakfast", "Lunch", "Dinner", "Bar", "Drinks", "Beverage",
    ],
    "Transportation": [
        "Transport", "Transportation", "Car", "Gas", "Gasoline", "Fuel", "Auto", "Vehicle",
        "Public Transit", "Uber", "Lyft", "Taxi", "Parking", "Toll", "Train", "Bus",
        "Subway", "Metro", "Car Insurance", "License", "Registration", "Maintenance",
    ],
    "Shopping": [
        "Shopping", "Clothing", "Shoes", "Accessories", "Electronics", "Amazon", "Online Shopping",
        "Retail", "Department Store", "Merchandise", "Purchase", "Consumer Goods", "Target",
        "Walmart", "Costco", "Best Buy", "Apple", "Books", "Music", "Hobby", "Craft",
    ],
    "Entertainment": [
        "Entertainment", "Movie", "Theater", "Concert", "Streaming", "Netflix", "Hulu",
        "Spotify", "Disney+", "HBO", "Apple TV", "Amazon Prime", "Subscription", "Game",
        "Gaming", "Hobby", "Sports", "Recreation", "Amusement", "Event", "Ticket",
    ],
    "Healthcare": [
        "Health", "Healthcare", "Medical", "Doctor", "Dental", "Vision", "Pharmacy",
        "Prescription", "Medicine", "Insurance", "Fitness", "Gym", "Wellness", "Therapy",
        "Mental Health", "Hospital", "Emergency", "Ambulance", "Specialist",
    ],
    "Travel": [
        "Travel", "Flight", "Airline", "Hotel", "Lodging", "Accommodation", "Vacation",
        "Trip", "Airbnb", "Booking", "Tourism", "Resort", "Cruise", "Car Rental",
        "Sightseeing", "Excursion", "Passport", "Visa", "Luggage",
    ],
    "Utilities": [
        "Utility", "Utilities", "Phone", "Mobile", "Cell Phone", "Telephone", "Internet",
        "Cable", "Streaming", "Electricity", "Gas", "Water", "Sewer", "Trash", "Garbage",
        "Wi-Fi", "Broadband", "Service Provider",
    ],
    "Education": [
        "Education", "School", "College", "University", "Tuition", "Books", "Class",
        "Course", "Degree", "Student Loan", "Training", "Learning", "Scholarship",
        "Research", "Fee", "Textbook", "Supplies", "Tutorial", "Workshop",
    ],
    "Taxes": [
        "Tax", "Taxes", "Income Tax", "Property Tax", "Sales Tax", "State Tax", "Federal Tax",
        "Tax Payment", "Tax Preparation", "Filing", "IRS", "Audit", "Withholding",
        "Tax Return", "Tax Refund", "Self-Employment Tax",
    ],
    "Gifts": [
        "Gift", "Gifts", "Donation", "Donations", "Charity", "Charitable", "Present",
        "Birthday", "Wedding", "Holiday", "Christmas", "Thanksgiving", "Easter",
        "Anniversary", "Baby Shower", "Graduation", "Contribution", "Fundraiser",
    ],
    "Savings": [
        "Savings", "Investment", "Retirement", "401k", "IRA", "Roth", "Brokerage",
        "Stock", "Bond", "Mutual Fund", "ETF", "Crypto", "Bitcoin", "Ethereum",
        "Certificate of Deposit", "Emergency Fund", "Financial Goal", "Portfolio",
    ],
}

# Last-resort containment checks for expenses that escaped the keyword table.
FALLBACK_KEYWORDS = (
    ("Food", ("food", "grocery", "restaurant", "eat")),
    ("Transportation", ("car", "gas", "uber", "transport")),
    ("Shopping", ("amazon", "walmart", "target", "shop")),
    ("Entertainment", ("netflix", "movie", "entertainment")),
)

DEFAULT_COLORS = {
    "income": "#7CC7E8",
    "budget": "#5CB8B2",
    "housing": "#D8BFD8",
    "food": "#ADD8E6",
    "transportation": "#FFA07A",
    "taxes": "#F9C6BB",
    "shopping": "#F8D568",
    "entertainment": "#B39CD0",
    "healthcare": "#FB9A99",
    "utilities": "#CAB2D6",
    "education": "#B2DF8A",
    "travel": "#A6CEE3",
    "gifts": "#FDBF6F",
    "otherExpenses": "#FFFFE0",
    "savings": "#A8E1D0",
}

# Ordered substring -> color key rules; first hit wins.
COLOR_RULES = (
    (("income",), "income"),
    (("housing",), "housing"),
    (("food",), "food"),
    (("transport",), "transportation"),
    (("tax",), "taxes"),
    (("shop",), "shopping"),
    (("entertain",), "entertainment"),
    (("health",), "healthcare"),
    (("util",), "utilities"),
    (("edu",), "education"),
    (("travel",), "travel"),
    (("gift", "donat"), "gifts"),
    (("savings", "invest"), "savings"),
)


def _freeze_keyword_map(keyword_map: dict) -> tuple[tuple[str, tuple[str, ...]], ...]:
    return tuple(
        (str(category), tuple(str(keyword) for keyword in keywords))
        for category, keywords in keyword_map.items()
    )


@dataclass(frozen=True)
class CategoryConfig:
    """Lookup tables driving classification and legend colors.

    Every table is ordered; the first matching entry wins.
    """

    canonical_categories: tuple[str, ...] = CANONICAL_CATEGORIES
    income_keywords: tuple[str, ...] = INCOME_KEYWORDS
    aliases: tuple[tuple[str, str], ...] = EXPENSE_ALIASES
    keyword_map: tuple[tuple[str, tuple[str, ...]], ...] = _freeze_keyword_map(DEFAULT_KEYWORD_MAP)
    fallback_keywords: tuple[tuple[str, tuple[str, ...]], ...] = FALLBACK_KEYWORDS
    colors: tuple[tuple[str, str], ...] = tuple(DEFAULT_COLORS.items())
    color_rules: tuple[tuple[tuple[str, ...], str], ...] = COLOR_RULES

    def color(self, key: str) -> str:
        palette = dict(self.colors)
        return palette.get(key, palette.get("otherExpenses", "#FFFFE0"))

    def with_keyword_map(self, keyword_map: dict) -> CategoryConfig:
        return replace(self, keyword_map=_freeze_keyword_map(keyword_map))


DEFAULT_CATEGORY_CONFIG = CategoryConfig()


def overflow_name(is_income: bool) -> str:
    return OTHER_INCOME if is_income else OTHER_EXPENSES


def classify_category(
    category: str | None,
    is_income: bool,
    config: CategoryConfig | None = None,
) -> str:
    """Map a free-text category onto a canonical name.

    Exact canonical names win, then (income) keyword containment or
    (expense) aliases, keyword table and broad fallback. Anything left
    unmatched is returned as given so custom categories survive.
    """
    cfg = config or DEFAULT_CATEGORY_CONFIG
    if category is None or not str(category).strip():
        return overflow_name(is_income)

    raw = str(category).strip()
    lowered = raw.lower()

    for canonical in cfg.canonical_categories:
        if lowered == canonical.lower():
            return canonical

    if is_income:
        if "income" in lowered:
            return "Income"
        for keyword in cfg.income_keywords:
            if keyword.lower() in lowered:
                return "Income"
        # Income is assumed pre-categorized; unknown names pass through.
        return raw

    for pattern, target in cfg.aliases:
        if re.fullmatch(pattern, lowered, flags=re.IGNORECASE):
            return target

    for target, keywords in cfg.keyword_map:
        for keyword in keywords:
            if keyword.lower() in lowered:
                return target

    for target, keywords in cfg.fallback_keywords:
        if any(keyword in lowered for keyword in keywords):
            return target

    return raw


def category_color(name: str, config: CategoryConfig | None = None) -> str:
    """Return the legend color for a node name."""
    cfg = config or DEFAULT_CATEGORY_CONFIG
    lowered = str(name).lower()
    if lowered == HUB_NAME.lower():
        return cfg.color("budget")
    for needles, key in cfg.color_rules:
        if any(needle in lowered for needle in needles):
            return cfg.color(key)
    return cfg.color("otherExpenses")


def assign_flow_categories(
    df: pd.DataFrame,
    is_income: bool,
    config: CategoryConfig | None = None,
) -> pd.DataFrame:
    """Add a FlowCategory column classified from the raw category column."""
    out = df.copy()
    raw = out["category"] if "category" in out.columns else pd.Series([""] * len(out), index=out.index)
    out["FlowCategory"] = raw.fillna("").apply(lambda value: classify_category(value, is_income, config))
    return out
