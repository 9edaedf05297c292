from __future__ import annotations

import logging
import random
import re
from typing import AsyncGenerator

from ollama_datagen.generators.base import GeneratorBase
from ollama_datagen.models import CategoriesResponse, Category

__all__ = ["CategoryGenerator", "improve_brand_name"]

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
# Give up when the model keeps repeating names it already produced
_MAX_STALE_BATCHES = 5

_PROMPT = """Generate {batch_size} product category names for an online retailer
of high-tech outdoor adventure goods and related clothing/electronics/etc.
Each category name is a single descriptive term, so it does not use the word 'and'.
Category names should be interesting and novel, e.g., "Mountain Unicycles", "AI Boots",
or "High-volume Water Filtration Plants", not simply "Tents".
This retailer sells relatively technical products.

Each category has a list of up to 8 brand names that make products in that category. All brand names are
purely fictional. Brand names are usually multiple words with spaces and/or special characters, e.g.
"Orange Gear", "Aqua Tech US", "Livewell", "E & K", "JAXⓇ".
Many brand names are used in multiple categories. Some categories have only 2 brands.

The response should be in a JSON format like below with the exact batch count of objects. It is very important you make sure it is in this format and that it is valid JSON.
{{ "categories": [{{"name":"Tents", "brands":["Rosewood", "Summit Kings"]}}] }}"""


def improve_brand_name(name: str, rng: random.Random) -> str:
    """Vary PascalCase brand names like ``AquaTech``.

    Each word boundary independently becomes ``Aqua Tech``, ``Aquatech``
    or stays as it is.
    """

    def replace(match: re.Match[str]) -> str:
        choice = rng.randrange(3)
        if choice == 0:
            return f"{match.group(1)} {match.group(2)}"
        if choice == 1:
            return f"{match.group(1)}{match.group(2).lower()}"
        return match.group(0)

    return _CAMEL_BOUNDARY.sub(replace, name)


class CategoryGenerator(GeneratorBase[Category]):
    item_type = Category

    def __init__(self, *args, num_categories: int = 50, batch_size: int = 25, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.num_categories = num_categories
        self.batch_size = batch_size

    @property
    def directory_name(self) -> str:
        return "categories"

    def get_id(self, item: Category) -> int:
        return item.category_id

    async def generate_core(self) -> AsyncGenerator[Category, None]:
        # Any existing categories are assumed to cover everything we need
        if self.has_existing_output():
            return

        names: set[str] = set()
        stale_batches = 0
        while len(names) < self.num_categories:
            self._log(f"Generating {self.batch_size} categories...")
            response = await self.service.get_and_parse_json_completion(
                _PROMPT.format(batch_size=self.batch_size),
                CategoriesResponse,
                max_tokens=70 * self.batch_size,
            )

            added = 0
            for category in response.categories:
                if category.name in names or len(names) >= self.num_categories:
                    continue
                names.add(category.name)
                added += 1
                category.category_id = len(names)
                category.brands = [improve_brand_name(b, self.rng) for b in category.brands]
                yield category

            stale_batches = 0 if added else stale_batches + 1
            if stale_batches >= _MAX_STALE_BATCHES:
                self._log(
                    f"Stopping at {len(names)} categories: no new names in "
                    f"{stale_batches} batches",
                    logging.WARNING,
                )
                return
