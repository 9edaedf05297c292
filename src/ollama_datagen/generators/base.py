"""Base class for generators that persist one JSON file per entity."""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, AsyncGenerator, Generic, Optional, TypeVar

from pydantic import BaseModel

from ollama_datagen.service import InteractionService

__all__ = ["GeneratorBase"]

T = TypeVar("T", bound=BaseModel)


class GeneratorBase(ABC, Generic[T]):
    """
    Generates entities of one type into ``<output_root>/<directory_name>``.

    Runs are resumable: subclasses skip generation when their directory
    already holds output, and ``generate`` always returns what is on disk.
    """

    #: Entity class used to read files back.
    item_type: type[T]

    def __init__(
        self,
        service: InteractionService,
        output_root: Path | str,
        *,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.service = service
        self.output_root = Path(output_root)
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    @property
    @abstractmethod
    def directory_name(self) -> str:
        ...

    @abstractmethod
    def get_id(self, item: T) -> Any:
        ...

    @abstractmethod
    def generate_core(self) -> AsyncGenerator[T, None]:
        """Yield new entities; the base class writes them."""
        ...

    @property
    def output_dir(self) -> Path:
        return self.output_root / self.directory_name

    filename_extension = ".json"

    def has_existing_output(self) -> bool:
        return self.output_dir.is_dir() and any(
            self.output_dir.glob(f"*{self.filename_extension}")
        )

    def item_path(self, item_id: Any) -> Path:
        return self.output_dir / f"{item_id}{self.filename_extension}"

    async def generate(self) -> list[T]:
        """Generate, write and return every entity of this type."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        started = time.perf_counter()
        async for item in self.generate_core():
            elapsed = time.perf_counter() - started
            item_id = self.get_id(item)
            self._log(
                f"Writing {type(item).__name__} {item_id} [generated in {elapsed:.2f}s]"
            )
            self.write(self.item_path(item_id), item)
            started = time.perf_counter()

        items = [self.read(path) for path in self.output_dir.glob(f"*{self.filename_extension}")]
        return sorted(items, key=self.get_id)

    def write(self, path: Path, item: T) -> None:
        # a killed run must never leave a truncated entity file behind
        partial = path.with_name(path.name + ".tmp")
        partial.write_text(item.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        partial.replace(path)

    def read(self, path: Path) -> T:
        try:
            return self.item_type.model_validate_json(path.read_text(encoding="utf-8"))
        except Exception as exc:
            self._log(f"Error reading {path}: {exc}", logging.ERROR)
            raise

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")
