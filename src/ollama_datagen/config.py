from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional

from dotenv import find_dotenv, load_dotenv

from ollama_datagen.client import DEFAULT_TIMEOUT
from ollama_datagen.formatters import ModelFamily

__all__ = ["ModelInfo", "load_model_info"]

DEFAULT_URL: Final = "localhost:11434"
DEFAULT_MODEL: Final = "mistral:7b"
DEFAULT_OUTPUT_DIR: Final = "output"

_ENV_URL: Final = "OLLAMA_URL"
_ENV_MODEL: Final = "OLLAMA_MODEL"
_ENV_FAMILY: Final = "OLLAMA_MODEL_FAMILY"
_ENV_TIMEOUT: Final = "OLLAMA_TIMEOUT"
_ENV_OUTPUT_DIR: Final = "DATAGEN_OUTPUT_DIR"
_ENV_SEED: Final = "DATAGEN_SEED"


@dataclass(frozen=True)
class ModelInfo:
    url: str
    model_name: str
    family: ModelFamily
    timeout: float = DEFAULT_TIMEOUT
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    seed: Optional[int] = None

    @property
    def base_url(self) -> str:
        """``url`` with a scheme; bare ``host:port`` values get ``http://``."""
        if "://" in self.url:
            return self.url
        return f"http://{self.url}"


def _parse_number(env_var: str, raw: str, kind: type) -> float | int:
    try:
        return kind(raw)
    except ValueError as exc:
        raise RuntimeError(f"{env_var} must be a {kind.__name__}, got {raw!r}") from exc


def load_model_info(
    *,
    url: Optional[str] = None,
    model_name: Optional[str] = None,
    family: Optional[str] = None,
    output_dir: Optional[str] = None,
    seed: Optional[int] = None,
) -> ModelInfo:
    """Resolve model settings from arguments, then the environment / ``.env``.

    Raises:
        RuntimeError: for an unknown model family or a malformed number.
    """
    load_dotenv(find_dotenv(usecwd=True))

    model = model_name or os.getenv(_ENV_MODEL) or DEFAULT_MODEL

    family_name = family or os.getenv(_ENV_FAMILY)
    if family_name:
        try:
            model_family = ModelFamily(family_name)
        except ValueError:
            allowed = ", ".join(f.value for f in ModelFamily)
            raise RuntimeError(
                f"Unknown model family {family_name!r}; expected one of: {allowed}"
            ) from None
    else:
        model_family = ModelFamily.from_model_name(model)

    timeout = DEFAULT_TIMEOUT
    raw_timeout = os.getenv(_ENV_TIMEOUT)
    if raw_timeout:
        timeout = float(_parse_number(_ENV_TIMEOUT, raw_timeout, float))

    if seed is None:
        raw_seed = os.getenv(_ENV_SEED)
        if raw_seed:
            seed = int(_parse_number(_ENV_SEED, raw_seed, int))

    return ModelInfo(
        url=url or os.getenv(_ENV_URL) or DEFAULT_URL,
        model_name=model,
        family=model_family,
        timeout=timeout,
        output_dir=Path(output_dir or os.getenv(_ENV_OUTPUT_DIR) or DEFAULT_OUTPUT_DIR),
        seed=seed,
    )
