# bluefin/config.py
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import os
import tomllib  # python >=3.11

logger = logging.getLogger(__name__)

# Defaults (pawn units)
PIECE_VALUES = {
    "PAWN": 1.0,
    "KNIGHT": 3.0,
    "BISHOP": 3.0,
    "ROOK": 5.0,
    "QUEEN": 9.0,
}

@dataclass
class SearchConfig:
    time_limit_ms: int = 1000
    stop_reserve: float = 0.05  # stop once 95% of the budget has elapsed
    exploration: float = 1.0
    prior_epsilon: float = 0.01
    min_iterations: int = 1  # 0 gives the strict "no result on expired budget" behaviour
    descend_to_leaf: bool = False
    max_selection_depth: int = 256
    reuse_table: bool = False  # keep transpositions across played moves

@dataclass
class EvalConfig:
    piece_values: Dict[str, float] = field(default_factory=lambda: PIECE_VALUES.copy())
    move_scorer: str = "uniform"  # "uniform" | "capture"
    promotion_bonus: float = 8.0

@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "bluefin.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    logger.warning("Ignoring unknown config key %s.%s", section, k)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        return cfg

    def validate(self) -> "Config":
        s = self.search
        if s.time_limit_ms < 0:
            raise ValueError(f"time_limit_ms must be >= 0, got {s.time_limit_ms}")
        if not 0.0 <= s.stop_reserve < 1.0:
            raise ValueError(f"stop_reserve must be in [0, 1), got {s.stop_reserve}")
        if s.prior_epsilon <= 0:
            raise ValueError(f"prior_epsilon must be > 0, got {s.prior_epsilon}")
        if s.min_iterations < 0:
            raise ValueError(f"min_iterations must be >= 0, got {s.min_iterations}")
        if s.max_selection_depth < 1:
            raise ValueError(f"max_selection_depth must be >= 1, got {s.max_selection_depth}")
        return self


def load_config(path: Optional[str] = None) -> Config:
    """Load config from TOML, then apply BLUEFIN_* environment overrides."""
    cfg = Config.load_from_toml(path or os.environ.get("BLUEFIN_CONFIG_TOML", "bluefin.toml"))
    override_time = os.environ.get("BLUEFIN_TIME_MS")
    if override_time:
        try:
            cfg.search.time_limit_ms = int(override_time)
        except ValueError:
            logger.warning("Ignoring non-integer BLUEFIN_TIME_MS=%r", override_time)
    override_level = os.environ.get("BLUEFIN_LOG_LEVEL")
    if override_level:
        cfg.log_level = override_level.upper()
    return cfg.validate()


def configure_logging(cfg: Optional[Config] = None) -> None:
    cfg = cfg or CONFIG
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# single globally importable config instance
CONFIG = load_config()
