"""Bluefin: a time-bounded Monte Carlo Tree Search move engine."""

from .config import CONFIG, Config, configure_logging
from .core import NoResultError, SearchEngine, Timer
from .main import Engine

__version__ = "0.1.0"
