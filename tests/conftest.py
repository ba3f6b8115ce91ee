"""Shared test fixtures for the CCCD extraction test suite."""

from pathlib import Path

import numpy as np
import pytest

SAMPLE_CARD_TEXT = (
    "CỘNG HÒA XÃ HỘI CHỦ NGHĨA VIỆT NAM\n"
    "Họ và tên: Nguyễn Văn An\n"
    "Ngày sinh: 05/03/1995\n"
    "Số CCCD: 001095012345\n"
)


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a synthetic RGB card-like image with dark text bars."""
    image = np.full((200, 300, 3), (210, 225, 240), dtype=np.uint8)
    image[60:70, 40:260] = (30, 30, 60)
    image[100:110, 40:200] = (30, 30, 60)
    return image


@pytest.fixture
def sample_rgba_image() -> np.ndarray:
    """Create a synthetic RGBA image with a varying alpha channel."""
    rng = np.random.default_rng(7)
    image = rng.integers(0, 256, size=(120, 160, 4), dtype=np.uint8)
    return image


@pytest.fixture
def sample_card_text() -> str:
    """Recognizer output for a cleanly read card."""
    return SAMPLE_CARD_TEXT


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
