"""
Units of work handed to the batch orchestrator.

Targets are frozen once constructed so a batch can never change what it was
asked to process.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.utils.url_utils import extract_domain, extract_company_name


class TargetKind(str, Enum):
    COMPETITOR = "competitor"
    DIRECTORY = "directory"
    RANKING = "ranking"


class DirectoryType(str, Enum):
    """Closed set of submission strategies. Anything unrecognized is GENERIC."""
    GOOGLE_MY_BUSINESS = "google_my_business"
    YELP = "yelp"
    FACEBOOK = "facebook"
    YELLOWPAGES = "yellowpages"
    ANGI = "angi"
    BBB = "bbb"
    GENERIC = "generic"

    @classmethod
    def parse(cls, value) -> "DirectoryType":
        """
        Map a free-form type tag onto a strategy variant.

        Examples:
            >>> DirectoryType.parse("Yelp")
            <DirectoryType.YELP: 'yelp'>
            >>> DirectoryType.parse("foursquare")
            <DirectoryType.GENERIC: 'generic'>
        """
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        key = _DIRECTORY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.GENERIC


_DIRECTORY_ALIASES = {
    "gmb": "google_my_business",
    "google": "google_my_business",
    "google_business": "google_my_business",
    "yellow_pages": "yellowpages",
    "angies_list": "angi",
    "angie's_list": "angi",
    "better_business_bureau": "bbb",
}


class PriorityTier(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class CompetitorURL(BaseModel):
    """A competitor website to extract."""
    url: str = Field(..., min_length=1)
    industry: str = ""
    name: Optional[str] = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @property
    def kind(self) -> TargetKind:
        return TargetKind.COMPETITOR

    @property
    def domain(self) -> str:
        return extract_domain(self.url) or self.url

    @property
    def label(self) -> str:
        return self.name or extract_company_name(self.domain)


class DirectoryDescriptor(BaseModel):
    """A business directory where a citation submission is attempted."""
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    directory_type: DirectoryType = DirectoryType.GENERIC
    priority: PriorityTier = PriorityTier.MEDIUM

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("directory_type", mode="before")
    @classmethod
    def parse_type(cls, v) -> DirectoryType:
        return DirectoryType.parse(v)

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v) -> PriorityTier:
        if isinstance(v, PriorityTier):
            return v
        try:
            return PriorityTier(str(v).strip().title())
        except ValueError:
            return PriorityTier.LOW

    @property
    def kind(self) -> TargetKind:
        return TargetKind.DIRECTORY

    @property
    def domain(self) -> str:
        return extract_domain(self.url) or self.name

    @property
    def label(self) -> str:
        return self.name


class RankingTarget(BaseModel):
    """One keyword lookup for one business in one location."""
    keyword: str = Field(..., min_length=1)
    location: str = ""
    business_name: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @property
    def kind(self) -> TargetKind:
        return TargetKind.RANKING

    @property
    def search_query(self) -> str:
        return f"{self.keyword} {self.location}".strip()

    @property
    def domain(self) -> str:
        return "googleapis.com"

    @property
    def label(self) -> str:
        return f"{self.business_name}: {self.keyword}"


class BusinessData(BaseModel):
    """NAP data and profile details submitted to directories."""
    business_name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    website: str = ""
    email: str = ""
    business_type: str = ""
    categories: List[str] = Field(default_factory=list)
    description: str = ""
    hours: str = ""
    photo_url: str = ""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @property
    def location(self) -> str:
        return ", ".join(p for p in (self.city, self.state) if p)

    @property
    def primary_category(self) -> str:
        if self.business_type:
            return self.business_type
        return self.categories[0] if self.categories else ""

    def field_value(self, field: str) -> str:
        """Value for a semantic form field ("name", "zip", "category", ...)."""
        if field == "name":
            return self.business_name
        if field == "zip":
            return self.zip_code
        if field == "category":
            return self.primary_category
        return str(getattr(self, field, "") or "")
