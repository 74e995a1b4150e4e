"""Runtime configuration for the PVSS engine and demo."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from constants import HASH_TO_POINT_MAX_ITERATIONS
from errors import InvalidInput

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_int(env: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidInput(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class PVSSConfig:
    """会话参数 / Node count, threshold and worker pool size."""

    number_of_nodes: int = 5
    threshold: int = 3
    max_workers: int | None = None
    log_level: str = "INFO"
    hash_to_point_max_iterations: int = HASH_TO_POINT_MAX_ITERATIONS

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "PVSSConfig":
        """Read NUMBER_OF_NODES, THRESHOLD, PVSS_MAX_WORKERS, LOG_LEVEL and HASH_TO_POINT_MAX_ITERATIONS."""
        env = os.environ if env is None else env
        defaults = cls()
        config = cls(
            number_of_nodes=_env_int(env, "NUMBER_OF_NODES", defaults.number_of_nodes),
            threshold=_env_int(env, "THRESHOLD", defaults.threshold),
            max_workers=_env_int(env, "PVSS_MAX_WORKERS", defaults.max_workers),
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
            hash_to_point_max_iterations=_env_int(
                env, "HASH_TO_POINT_MAX_ITERATIONS", defaults.hash_to_point_max_iterations
            ),
        )
        config.validate()
        return config

    def validate(self) -> None:
        if self.number_of_nodes < 1:
            raise InvalidInput(f"number_of_nodes must be >= 1, got {self.number_of_nodes}")
        if not 1 <= self.threshold <= self.number_of_nodes:
            raise InvalidInput(
                f"threshold must satisfy 1 <= t <= n, got t={self.threshold}, n={self.number_of_nodes}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise InvalidInput(f"max_workers must be >= 1, got {self.max_workers}")
        if self.hash_to_point_max_iterations < 1:
            raise InvalidInput("hash_to_point_max_iterations must be >= 1")
        if logging.getLevelName(self.log_level) == f"Level {self.log_level}":
            raise InvalidInput(f"unknown log level {self.log_level!r}")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
