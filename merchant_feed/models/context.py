"""Consumer-side inputs to a feed evaluation."""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ALL_CATEGORIES = "all"


class SortCriteria(str, Enum):
    """Secondary ordering used when browsing without a search query."""
    GENERAL = "general"
    DELIVERY = "delivery"
    SERVICE = "service"
    PRODUCT = "product"


class ConsumerContext(BaseModel):
    """What the consumer typed, picked and where they are.

    Attributes:
        query: Free-text search; empty means browsing
        category_id: Selected category, ``"all"`` matches every merchant
        neighborhood: Neighborhood of the chosen address, None until one is chosen
        sort_by: Browse ordering after the open/closed split
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    query: str = ""
    category_id: str = Field(default=ALL_CATEGORIES, alias="categoryId")
    neighborhood: Optional[str] = None
    sort_by: SortCriteria = Field(default=SortCriteria.GENERAL, alias="sortBy")

    @field_validator("query", mode="before")
    @classmethod
    def _none_query(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("category_id", mode="before")
    @classmethod
    def _blank_category_is_all(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return ALL_CATEGORIES
        return v

    @field_validator("neighborhood", mode="before")
    @classmethod
    def _blank_neighborhood_is_unknown(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def browses_all_categories(self) -> bool:
        return self.category_id == ALL_CATEGORIES
