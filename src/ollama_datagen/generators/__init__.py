"""Entity generators built on the interaction service."""

from .base import GeneratorBase
from .categories import CategoryGenerator, improve_brand_name
from .products import ProductGenerator

__all__ = [
    "GeneratorBase",
    "CategoryGenerator",
    "ProductGenerator",
    "improve_brand_name",
]
