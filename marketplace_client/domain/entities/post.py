"""News feed post model."""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Post(BaseModel):
    """A feed post. Only the fields the client displays are decoded."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    article_id: Optional[str] = None
    title: str
    link: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    pub_date: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("pubDate", "pub_date"))
    image_url: Optional[str] = None
    source_id: Optional[str] = None
    keywords: Optional[List[str]] = None
    category: List[str] = Field(default_factory=list)
    language: Optional[str] = None
