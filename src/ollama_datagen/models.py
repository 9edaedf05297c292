"""Generated entity types, stored as camelCase JSON."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = ["Category", "Product", "CategoriesResponse", "ProductsResponse"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(CamelModel):
    category_id: int = 0
    name: str
    brands: list[str] = Field(default_factory=list)


class Product(CamelModel):
    product_id: int = 0
    category_id: int = 0
    brand: str
    model: str
    description: str
    price: float


class CategoriesResponse(CamelModel):
    categories: list[Category]


class ProductsResponse(CamelModel):
    products: list[Product]
