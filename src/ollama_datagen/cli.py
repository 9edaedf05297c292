"""Command line entry point: generate categories, then products."""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from typing import Optional, Sequence

from ollama_datagen.client import OllamaClient
from ollama_datagen.config import ModelInfo, load_model_info
from ollama_datagen.formatters import ModelFamily
from ollama_datagen.generators import CategoryGenerator, ProductGenerator
from ollama_datagen.service import InteractionService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-datagen",
        description="Generate a fictional e-commerce dataset with a local Ollama server.",
    )
    parser.add_argument("--model", help="Ollama model tag, e.g. mistral:7b")
    parser.add_argument(
        "--family",
        choices=[f.value for f in ModelFamily],
        help="Prompt template family (default: inferred from the model name)",
    )
    parser.add_argument("--url", help="Ollama server, host:port or full URL")
    parser.add_argument("--output", help="Output directory root")
    parser.add_argument("--seed", type=int, help="Seed for reproducible random choices")
    parser.add_argument("--categories", type=int, default=50, help="Number of categories")
    parser.add_argument("--products", type=int, default=200, help="Number of products")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


async def run(info: ModelInfo, *, num_categories: int, num_products: int) -> None:
    rng = random.Random(info.seed)
    client = OllamaClient(info.model_name, base_url=info.base_url, timeout=info.timeout)

    async with InteractionService(client, info.family) as service:
        logger.info(f"ModelInfo: {info.base_url}, {info.model_name} ({info.family.value})")

        categories = await CategoryGenerator(
            service,
            info.output_dir,
            rng=rng,
            num_categories=num_categories,
            batch_size=min(25, num_categories),
        ).generate()
        print(f"Got {len(categories)} categories")

        products = await ProductGenerator(
            service,
            info.output_dir,
            rng=rng,
            categories=categories,
            num_products=num_products,
        ).generate()
        print(f"Got {len(products)} products")


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    info = load_model_info(
        url=args.url,
        model_name=args.model,
        family=args.family,
        output_dir=args.output,
        seed=args.seed,
    )
    asyncio.run(
        run(info, num_categories=args.categories, num_products=args.products)
    )


if __name__ == "__main__":
    main()
