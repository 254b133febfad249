import logging
import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "TOOLSHELF_"


class Settings(BaseModel):
    store: Literal["memory", "file", "rest"] = "file"
    store_path: Path = Path("toolshelf_store.json")
    store_url: Optional[str] = None
    collection: str = "tools"
    mirror_path: Optional[Path] = Path("toolshelf_mirror.json")
    undo_seconds: float = Field(default=5.0, gt=0)
    request_timeout: float = Field(default=5.0, gt=0)
    host: str = "127.0.0.1"
    port: int = 8765
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        return cls.model_validate(values)


def configure_logging(level: str = "info"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
