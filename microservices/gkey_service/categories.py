"""
G-Key Category Catalogue

Key categories with their default cooloff periods, plus the cooloff presets
brands pick from when creating a campaign.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import CategoryInfo, CooloffOptionInfo

DEFAULT_COOLOFF_HOURS = 720  # 30 days
MAX_COOLOFF_HOURS = 8760  # 1 year
FALLBACK_CATEGORY_COOLOFF_HOURS = 24


@dataclass(frozen=True)
class KeyCategory:
    category: str
    display_name: str
    description: str
    color: str
    default_cooloff_hours: int
    max_usage_per_day: int = 1
    legacy: bool = False

    def to_info(self) -> CategoryInfo:
        return CategoryInfo(
            value=self.category,
            display_name=self.display_name,
            description=self.description,
            color=self.color,
            default_cooloff_hours=self.default_cooloff_hours,
            max_usage_per_day=self.max_usage_per_day,
            legacy=self.legacy,
        )


KEY_CATEGORIES: List[KeyCategory] = [
    KeyCategory("gaming", "Gaming", "Video games, gaming hardware, and esports", "#ec4899", 360),
    KeyCategory("technology", "Tech", "Software, hardware, and tech services", "#8b5cf6", 720),
    KeyCategory("lifestyle", "Lifestyle", "Lifestyle products and services", "#14b8a6", 720),
    KeyCategory("entertainment", "Entertainment", "Movies, music, books, and entertainment services", "#a855f7", 720),
    KeyCategory("sports", "Sports", "Sports equipment, events, and athletic services", "#dc2626", 1080),
    KeyCategory("music", "Music", "Music instruments, streaming, and audio equipment", "#7c3aed", 720),
    KeyCategory("romance", "Romance", "Dating services, romantic gifts, and relationship products", "#e11d48", 1440),
    KeyCategory("beauty", "Beauty", "Cosmetics, skincare, and beauty services", "#ec4899", 1080),
    KeyCategory("fashion", "Fashion", "Clothing, accessories, and fashion brands", "#f97316", 1080),
    KeyCategory("food", "Food", "Food products, restaurants, and culinary services", "#22c55e", 720),
    KeyCategory("travel", "Travel", "Travel services, hotels, and tourism", "#10b981", 1080),
    KeyCategory("education", "Education", "Educational institutions and learning platforms", "#0ea5e9", 720),
    KeyCategory("fitness", "Fitness", "Fitness equipment, gyms, and wellness services", "#06b6d4", 1080),
    KeyCategory("business", "Business", "Business services, B2B products, and professional tools", "#059669", 1440),
    KeyCategory("art", "Art", "Art supplies, galleries, and creative services", "#9333ea", 720),
    # Legacy categories still held by older accounts
    KeyCategory("retail", "Retail", "General retail and consumer goods", "#3b82f6", 720, legacy=True),
    KeyCategory("watches-timepieces", "Watches & Timepieces", "Watches, clocks, and time-related accessories", "#f59e0b", 2160, legacy=True),
    KeyCategory("automotive", "Automotive", "Cars, motorcycles, and automotive accessories", "#ef4444", 1440, legacy=True),
    KeyCategory("food-beverage", "Food & Beverage", "Food products, restaurants, and beverages", "#84cc16", 1080, legacy=True),
    KeyCategory("fashion-beauty", "Fashion & Beauty", "Clothing, cosmetics, and personal care", "#f43f5e", 1080, legacy=True),
    KeyCategory("health-fitness", "Health & Fitness", "Healthcare, fitness equipment, and wellness", "#0891b2", 1440, legacy=True),
    KeyCategory("travel-tourism", "Travel & Tourism", "Travel services, hotels, and tourism", "#059669", 1080, legacy=True),
    KeyCategory("finance-insurance", "Finance & Insurance", "Banking, insurance, and financial services", "#15803d", 2160, legacy=True),
]

_BY_NAME: Dict[str, KeyCategory] = {c.category: c for c in KEY_CATEGORIES}


@dataclass(frozen=True)
class CooloffOption:
    hours: int
    label: str
    description: str
    recommended: bool = False

    def to_info(self) -> CooloffOptionInfo:
        return CooloffOptionInfo(
            hours=self.hours,
            label=self.label,
            description=self.description,
            duration=format_cooloff_duration(self.hours),
            recommended=self.recommended,
        )


COOLOFF_OPTIONS: List[CooloffOption] = [
    CooloffOption(24, "1 Day", "Quick turnaround for short-term promotions"),
    CooloffOption(72, "3 Days", "Short break for flash sales or limited offers"),
    CooloffOption(168, "1 Week", "Standard break for weekly promotions"),
    CooloffOption(336, "2 Weeks", "Moderate cooloff for medium campaigns"),
    CooloffOption(720, "30 Days", "Standard cooloff period for most campaigns", recommended=True),
    CooloffOption(1440, "60 Days", "Extended break for major brand campaigns"),
    CooloffOption(2160, "90 Days", "Long cooloff for exclusive high-value campaigns"),
    CooloffOption(4320, "6 Months", "Extended exclusivity for premium partnerships"),
    CooloffOption(8760, "1 Year", "Maximum cooloff for annual exclusive deals"),
]


def normalize_category(raw: Optional[str]) -> str:
    """Canonical form used for storage and lookup: trimmed and lower-cased"""
    if raw is None:
        raise ValueError("Category is required")
    normalized = raw.strip().lower()
    if not normalized:
        raise ValueError("Category is required")
    return normalized


def get_category_info(category: str) -> Optional[KeyCategory]:
    try:
        return _BY_NAME.get(normalize_category(category))
    except ValueError:
        return None


def is_known_category(category: str) -> bool:
    return get_category_info(category) is not None


def all_categories(include_legacy: bool = True) -> List[KeyCategory]:
    if include_legacy:
        return list(KEY_CATEGORIES)
    return [c for c in KEY_CATEGORIES if not c.legacy]


def category_names() -> List[str]:
    return [c.category for c in KEY_CATEGORIES]


def get_default_cooloff_hours(category: str) -> int:
    info = get_category_info(category)
    return info.default_cooloff_hours if info else FALLBACK_CATEGORY_COOLOFF_HOURS


def cooloff_option_label(hours: int) -> str:
    for option in COOLOFF_OPTIONS:
        if option.hours == hours:
            return option.label
    return f"{hours} hours"


def format_cooloff_duration(hours: int) -> str:
    """Coarse duration label for a cooloff length in hours"""
    def _plural(n: int, unit: str) -> str:
        return f"{n} {unit}{'' if n == 1 else 's'}"

    if hours < 24:
        return _plural(hours, "hour")
    if hours < 168:
        return _plural(hours // 24, "day")
    if hours < 720:
        return _plural(hours // 168, "week")
    if hours < 8760:
        return _plural(hours // 720, "month")
    return _plural(hours // 8760, "year")
