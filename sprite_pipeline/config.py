from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

from .models.background_spec import BackgroundSpec

# Load environment variables
load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def _parse_color(raw: str) -> Tuple[int, int, int]:
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if len(parts) != 3:
        raise ValueError(f"Background color needs 3 components, got {raw!r}")
    return tuple(int(p) for p in parts)


@dataclass(frozen=True)
class Settings:
    """
    Snapshot of the environment-driven knobs.
    Read once via ``Settings.from_env()`` and pass around; nothing here re-reads os.environ.
    """
    background_color: Tuple[int, int, int] = (255, 0, 0)
    color_threshold: float = 155.0
    alpha_threshold: int = 10
    base_ext: str = ".png"
    alt_ext: str = ".webp"
    fetch_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            background_color=_parse_color(os.getenv("SPRITE_BG_COLOR", "255,0,0")),
            color_threshold=float(os.getenv("SPRITE_COLOR_THRESHOLD", "155")),
            alpha_threshold=int(os.getenv("SPRITE_ALPHA_THRESHOLD", "10")),
            base_ext=os.getenv("SPRITE_BASE_EXT", ".png"),
            alt_ext=os.getenv("SPRITE_ALT_EXT", ".webp"),
            fetch_timeout=float(os.getenv("SPRITE_FETCH_TIMEOUT", "10")),
            log_level=os.getenv("SPRITE_LOG_LEVEL", "INFO").upper(),
        )

    def background_spec(self) -> BackgroundSpec:
        return BackgroundSpec(self.background_color, self.color_threshold)


def default_background_spec() -> BackgroundSpec:
    return Settings.from_env().background_spec()


def configure_logging(level: str | None = None) -> None:
    """Centralized logging configuration, meant to run once from the host application."""
    logging.basicConfig(
        level=level or Settings.from_env().log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
