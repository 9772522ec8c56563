"""
Engine configuration loaded from environment variables

The two batch policies answer questions the legacy behavior left open:
which report cards take part in the batch rank pass, and what class_size a
batch-created card records. Defaults reproduce the legacy behavior.
"""

import logging
import os
from enum import Enum
from functools import lru_cache

from pydantic import BaseModel, Field


class RankScope(str, Enum):
    """Report cards included in the batch rank pass"""
    BATCH = "batch"  # only cards created by this call
    CLASS = "class"  # also pre-existing cards of the same class/period/year


class ClassSizePolicy(str, Enum):
    """What class_size records on batch-created report cards"""
    ROSTER = "roster"  # full roster size
    RANKED = "ranked"  # number of ranked cards


class EngineSettings(BaseModel):
    """Runtime settings for the bulletin engine"""

    database_url: str = Field("sqlite+aiosqlite:///./bulletins.db", description="SQLAlchemy async database URL")
    batch_rank_scope: RankScope = Field(RankScope.BATCH, description="Cards ranked together after a batch")
    batch_class_size_policy: ClassSizePolicy = Field(ClassSizePolicy.ROSTER, description="class_size source in batch mode")
    log_level: str = Field("INFO", description="Root logging level for entry points")
    show_progress: bool = Field(False, description="Display a progress bar during batch generation")

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Build settings from BULLETIN_* environment variables"""
        return cls(
            database_url=os.getenv("BULLETIN_DATABASE_URL", "sqlite+aiosqlite:///./bulletins.db"),
            batch_rank_scope=os.getenv("BULLETIN_BATCH_RANK_SCOPE", RankScope.BATCH.value),
            batch_class_size_policy=os.getenv("BULLETIN_BATCH_CLASS_SIZE", ClassSizePolicy.ROSTER.value),
            log_level=os.getenv("BULLETIN_LOG_LEVEL", "INFO").upper(),
            show_progress=os.getenv("BULLETIN_SHOW_PROGRESS", "false").lower() in ("1", "true", "yes"),
        )


@lru_cache()
def get_settings() -> EngineSettings:
    return EngineSettings.from_env()


def configure_logging(settings: EngineSettings = None) -> None:
    """Configure root logging for scripts and other entry points"""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
