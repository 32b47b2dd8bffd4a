"""Product listing models."""

import json
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .user import ImageFile


class Location(BaseModel):
    """Where a listed item can be picked up."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(min_length=1)
    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)

    def to_json(self) -> str:
        return json.dumps(self.model_dump())


class ProductImage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    url: str
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))


class Product(BaseModel):
    """A product listing as returned by the API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: str
    description: str = ""
    price: float = 0
    images: List[ProductImage] = Field(default_factory=list)
    location: Optional[Location] = None


class ProductDraft(BaseModel):
    """Payload of ``POST /products``."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=120)
    description: str = Field(min_length=1, max_length=5000)
    price: float = Field(ge=0)
    location: Location
    images: List[ImageFile] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Partial payload of ``PUT /products/:id``; unset fields are not sent."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    price: Optional[float] = Field(default=None, ge=0)
    location: Optional[Location] = None
    images: Optional[List[ImageFile]] = None
