"""Configuration management for fitengine."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Seconds to wait on each data-source query before treating the window as empty
    SOURCE_TIMEOUT: float = float(os.getenv("FITENGINE_SOURCE_TIMEOUT", "5.0"))

    # How long the final heart-rate sample of an activity is assumed to hold
    HR_TAIL_SEC: float = float(os.getenv("FITENGINE_HR_TAIL_SEC", "5.0"))

    # Nutrition targets used when the source reports none
    PROTEIN_TARGET_G: float = float(os.getenv("FITENGINE_PROTEIN_TARGET_G", "150"))
    CALORIE_TARGET: float = float(os.getenv("FITENGINE_CALORIE_TARGET", "2500"))

    # Weekly running distance goal (km)
    WEEKLY_GOAL_KM: float = float(os.getenv("FITENGINE_WEEKLY_GOAL_KM", "30"))

    # History windows (days)
    LOAD_WINDOW_DAYS: int = 28
    RACE_WINDOW_DAYS: int = int(os.getenv("FITENGINE_RACE_WINDOW_DAYS", "365"))
    STRENGTH_WINDOW_DAYS: int = int(os.getenv("FITENGINE_STRENGTH_WINDOW_DAYS", "60"))

    @classmethod
    def log_level(cls) -> int:
        """Resolve LOG_LEVEL to a logging level, falling back to INFO."""
        level = logging.getLevelName(cls.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO
