"""
Guest blog site schemas for validation and serialization.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum
from decimal import Decimal

from models.base import BaseSchema, TimestampMixin


class SiteCategory(str, Enum):
    """Guest blog site categories."""
    BUSINESS_ENTREPRENEURSHIP = "BUSINESS_ENTREPRENEURSHIP"
    MARKETING_SEO = "MARKETING_SEO"
    TECHNOLOGY_GADGETS = "TECHNOLOGY_GADGETS"
    HEALTH_FITNESS = "HEALTH_FITNESS"
    LIFESTYLE_WELLNESS = "LIFESTYLE_WELLNESS"
    FINANCE_INVESTMENT = "FINANCE_INVESTMENT"
    EDUCATION_CAREER = "EDUCATION_CAREER"
    TRAVEL_TOURISM = "TRAVEL_TOURISM"
    FOOD_NUTRITION = "FOOD_NUTRITION"
    REAL_ESTATE_HOME_IMPROVEMENT = "REAL_ESTATE_HOME_IMPROVEMENT"
    AI_FUTURE_TECH = "AI_FUTURE_TECH"
    ECOMMERCE_STARTUPS = "ECOMMERCE_STARTUPS"
    SUSTAINABILITY_GREEN_LIVING = "SUSTAINABILITY_GREEN_LIVING"
    PARENTING_RELATIONSHIPS = "PARENTING_RELATIONSHIPS"
    FASHION_BEAUTY = "FASHION_BEAUTY"
    ENTERTAINMENT_MEDIA = "ENTERTAINMENT_MEDIA"
    SPORTS_FITNESS = "SPORTS_FITNESS"
    GENERAL = "GENERAL"
    OTHERS = "OTHERS"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SiteCategory"]:
        """Case-insensitive lookup, None if the value is not a category."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class SiteStatus(str, Enum):
    """Listing status."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SiteStatus"]:
        """Case-insensitive lookup, None if the value is not a status."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


CATEGORY_DISPLAY_NAMES: dict[SiteCategory, str] = {
    SiteCategory.BUSINESS_ENTREPRENEURSHIP: "Business & Entrepreneurship",
    SiteCategory.MARKETING_SEO: "Marketing & SEO",
    SiteCategory.TECHNOLOGY_GADGETS: "Technology & Gadgets",
    SiteCategory.HEALTH_FITNESS: "Health & Fitness",
    SiteCategory.LIFESTYLE_WELLNESS: "Lifestyle & Wellness",
    SiteCategory.FINANCE_INVESTMENT: "Finance & Investment",
    SiteCategory.EDUCATION_CAREER: "Education & Career",
    SiteCategory.TRAVEL_TOURISM: "Travel & Tourism",
    SiteCategory.FOOD_NUTRITION: "Food & Nutrition",
    SiteCategory.REAL_ESTATE_HOME_IMPROVEMENT: "Real Estate & Home Improvement",
    SiteCategory.AI_FUTURE_TECH: "AI & Future Tech",
    SiteCategory.ECOMMERCE_STARTUPS: "E-commerce & Startups",
    SiteCategory.SUSTAINABILITY_GREEN_LIVING: "Sustainability & Green Living",
    SiteCategory.PARENTING_RELATIONSHIPS: "Parenting & Relationships",
    SiteCategory.FASHION_BEAUTY: "Fashion & Beauty",
    SiteCategory.ENTERTAINMENT_MEDIA: "Entertainment & Media",
    SiteCategory.SPORTS_FITNESS: "Sports & Fitness",
    SiteCategory.GENERAL: "General",
    SiteCategory.OTHERS: "Others",
}


class SiteCreate(BaseSchema):
    """
    Create a new guest blog site.

    Required: site_url, publisher_id, category, country, site_language, tat, base_price
    Optional: da, dr, ahrefs_traffic, ss, status
    """

    site_url: str = Field(
        ...,
        min_length=1,
        description="Normalized absolute URL (unique)",
        examples=["https://techcrunch.com/"]
    )
    publisher_id: str = Field(
        ...,
        description="Publisher UUID"
    )
    da: int = Field(0, ge=0, le=100, description="Domain Authority")
    dr: int = Field(0, ge=0, le=100, description="Domain Rating")
    ahrefs_traffic: int = Field(0, ge=0, description="Monthly organic traffic")
    ss: Optional[int] = Field(None, ge=0, le=100, description="Spam score")
    tat: str = Field(
        ...,
        min_length=1,
        description="Turnaround time",
        examples=["2-3 days"]
    )
    category: SiteCategory
    status: SiteStatus = SiteStatus.ACTIVE
    base_price: Decimal = Field(..., ge=0, description="Base price before client markup")
    country: str = Field(..., min_length=1)
    site_language: str = Field(..., min_length=1, examples=["en"])

    @field_validator("category", "status", mode="before")
    @classmethod
    def enum_uppercase(cls, v):
        """Accept lowercase enum values from uploads."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class SiteResponse(SiteCreate, TimestampMixin):
    """Guest blog site as stored."""
    id: str

    @property
    def category_display_name(self) -> str:
        return CATEGORY_DISPLAY_NAMES[self.category]
