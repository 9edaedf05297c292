from __future__ import annotations

import logging
from typing import AsyncGenerator, Sequence

from ollama_datagen.generators.base import GeneratorBase
from ollama_datagen.models import Category, Product, ProductsResponse
from ollama_datagen.parallel import DEFAULT_CONCURRENCY, map_parallel

__all__ = ["ProductGenerator"]

_PROMPT = """Write list of {batch_size} products for an online retailer
of outdoor adventure goods and related electronics, clothing, and homeware. There is a focus on high-tech products. They match the following category/brand pairs:
{pairs}

Model names are up to 50 characters long, but usually shorter. Sometimes they include numbers, specs, or product codes.
Example model names: "iGPS 220c 64GB", "Nomad Camping Stove", "UX Polarized Sunglasses (Womens)", "40L Backpack, Green"
Do not repeat the brand name in the model name.

The description is up to 200 characters long and is the marketing text that will appear on the product page.
Include the key features and selling points.

The response should be in a JSON format like below with the exact batch count of objects. It is very important you make sure it is in this format and that it is valid JSON.

{{
  "products": [
    {{ "id": 1, "brand": "Garmin", "model": "iGPS 220c 64GB", "description": "High-precision GPS with 64GB storage, waterproof, and rugged design.", "price": 299.99 }}
  ]
}}
"""

CategoryBrand = tuple[Category, str]


class ProductGenerator(GeneratorBase[Product]):
    """Products for random category/brand pairs, generated in parallel batches."""

    item_type = Product

    def __init__(
        self,
        *args,
        categories: Sequence[Category],
        num_products: int = 200,
        batch_size: int = 5,
        concurrency_limit: int = DEFAULT_CONCURRENCY,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        if not categories:
            raise ValueError("ProductGenerator needs at least one category")
        self.categories = list(categories)
        self.num_products = num_products
        self.batch_size = batch_size
        self.concurrency_limit = concurrency_limit

    @property
    def directory_name(self) -> str:
        return "products"

    def get_id(self, item: Product) -> int:
        return item.product_id

    def choose_pairs(self) -> list[CategoryBrand]:
        pairs = []
        for _ in range(self.batch_size):
            category = self.rng.choice(self.categories)
            brand = self.rng.choice(category.brands) if category.brands else ""
            pairs.append((category, brand))
        return pairs

    async def generate_batch(self, pairs: list[CategoryBrand]) -> list[Product]:
        listing = "\n".join(
            f"- product {i}: category {category.name}, brand: {brand}"
            for i, (category, brand) in enumerate(pairs, start=1)
        )
        response = await self.service.get_and_parse_json_completion(
            _PROMPT.format(batch_size=len(pairs), pairs=listing),
            ProductsResponse,
            max_tokens=200 * len(pairs),
        )

        if len(response.products) > len(pairs):
            self._log(
                f"Dropping {len(response.products) - len(pairs)} surplus product(s)",
                logging.DEBUG,
            )
        products = []
        for product, (category, _) in zip(response.products, pairs):
            product.category_id = category.category_id
            products.append(product)
        return products

    async def generate_core(self) -> AsyncGenerator[Product, None]:
        # Any existing products are assumed to cover everything we need
        if self.has_existing_output():
            return

        # Pairs are drawn up front so the RNG sequence doesn't depend on
        # which batch finishes first
        batches = [self.choose_pairs() for _ in range(self.num_products // self.batch_size)]

        product_id = 0
        async for batch in map_parallel(batches, self.generate_batch, self.concurrency_limit):
            for product in batch:
                product_id += 1
                product.product_id = product_id
                yield product
