from dataclasses import dataclass
from typing import Mapping, Optional
import logging
import os

LOG_LEVEL_ENV = "OSPF_GRAPH_LOG_LEVEL"
STRICT_DECODE_ENV = "OSPF_GRAPH_STRICT_DECODE"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    log_level: str = "WARNING"
    strict_decode: bool = False  # abort the whole LSDB on the first bad record

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Reads settings from OSPF_GRAPH_* environment variables."""
        if environ is None:
            environ = os.environ
        return cls(
            log_level=environ.get(LOG_LEVEL_ENV, cls.log_level).upper(),
            strict_decode=environ.get(STRICT_DECODE_ENV, "").strip().lower() in _TRUE_VALUES,
        )

    def configure_logging(self) -> None:
        level = logging.getLevelName(self.log_level)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level {self.log_level!r}.")
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
