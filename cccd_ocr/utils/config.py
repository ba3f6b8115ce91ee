"""Configuration management for the CCCD extraction pipeline.

Loads and validates YAML configuration with defaults matching the
values the pipeline was tuned with: image enhancement factors, the
Tesseract language and segmentation mode, and the plausible birth-year
window used when validating dates of birth.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_SHARPEN_KERNEL: list[list[float]] = [
    [0.0, -0.5, 0.0],
    [-0.5, 3.0, -0.5],
    [0.0, -0.5, 0.0],
]


class EnhancementConfig(BaseModel):
    """Configuration for the OCR image enhancer."""

    enabled: bool = True
    max_dimension: int = Field(default=2500, gt=0)
    min_dimension: int = Field(default=800, gt=0)
    contrast_factor: float = Field(default=1.3, gt=0)
    brightness_factor: float = Field(default=1.1, gt=0)
    sharpen_kernel: list[list[float]] = Field(
        default_factory=lambda: [row[:] for row in DEFAULT_SHARPEN_KERNEL]
    )

    @field_validator("sharpen_kernel")
    @classmethod
    def _kernel_is_3x3(cls, value: list[list[float]]) -> list[list[float]]:
        if len(value) != 3 or any(len(row) != 3 for row in value):
            raise ValueError("sharpen_kernel must be a 3x3 matrix")
        return value

    @model_validator(mode="after")
    def _dimensions_ordered(self) -> "EnhancementConfig":
        if self.min_dimension > self.max_dimension:
            raise ValueError("min_dimension must not exceed max_dimension")
        return self


class OCRConfig(BaseModel):
    """Configuration for the Tesseract recognizer."""

    tesseract_cmd: str | None = None
    lang: str = "vie"
    psm: int = 3


class ExtractionConfig(BaseModel):
    """Configuration for CCCD field extraction.

    The birth-year window encodes "adult at the time the rules were
    written" and drifts out of date as the years pass, so it lives here
    rather than in the extractor.
    """

    min_birth_year: int = 1950
    max_birth_year: int = 2006

    @model_validator(mode="after")
    def _years_ordered(self) -> "ExtractionConfig":
        if self.min_birth_year > self.max_birth_year:
            raise ValueError("min_birth_year must not exceed max_birth_year")
        return self


class AppConfig(BaseModel):
    """Top-level application configuration."""

    enhancement: EnhancementConfig = Field(default_factory=EnhancementConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.

    Raises:
        pydantic.ValidationError: If the file holds invalid values.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
