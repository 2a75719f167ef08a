"""Validated construction input for a bandit.

A bandit is built either from explicit per-arm statistics or from a count of
empty arms. The two cases are separate types so the choice is made once, here,
instead of being inferred from whichever option happens to be set.
"""
from __future__ import annotations

import json
import math
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from bayesbandit.errors import InvalidConfiguration
from bayesbandit.utils.logger import logger

CONFIG_KEYS = frozenset({"arms", "number_of_arms"})


def _check_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidConfiguration(f"{name} must be non-negative, got {value}")
    return int(value)


@dataclass(frozen=True)
class ArmStats:
    trials: int = 0
    successes: float = 0.0

    def __post_init__(self) -> None:
        trials = _check_count("trials", self.trials)
        if isinstance(self.successes, bool) or not isinstance(self.successes, numbers.Real):
            raise InvalidConfiguration(f"successes must be a number, got {self.successes!r}")
        if not math.isfinite(self.successes) or not 0 <= self.successes <= trials:
            raise InvalidConfiguration(f"successes={self.successes} must lie in [0, trials={trials}]")
        object.__setattr__(self, "trials", trials)

    @classmethod
    def from_value(cls, value: Any) -> "ArmStats":
        """Accept an ``ArmStats``, a ``{"trials", "successes"}`` mapping or a ``(trials, successes)`` pair."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            unknown = set(value) - {"trials", "successes"}
            if unknown:
                raise InvalidConfiguration(f"Unknown arm fields {sorted(unknown)}")
            return cls(trials=value.get("trials", 0), successes=value.get("successes", 0.0))
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(trials=value[0], successes=value[1])
        raise InvalidConfiguration(f"Cannot build arm statistics from {value!r}")


@dataclass(frozen=True)
class FromStats:
    arms: Tuple[ArmStats, ...]

    def __post_init__(self) -> None:
        if isinstance(self.arms, (str, bytes, Mapping)) or not isinstance(self.arms, Iterable):
            raise InvalidConfiguration(f"arms must be a sequence of arm statistics, got {self.arms!r}")
        object.__setattr__(self, "arms", tuple(ArmStats.from_value(arm) for arm in self.arms))


@dataclass(frozen=True)
class EmptyCount:
    n: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "n", _check_count("number_of_arms", self.n))


BanditConfig = Union[FromStats, EmptyCount]


def resolve_config(arms: Optional[Iterable[Any]] = None, number_of_arms: Optional[int] = None) -> BanditConfig:
    """Pick the construction mode: explicit arms win over a count, and one of them is required."""
    if arms is not None:
        if number_of_arms is not None:
            logger.warning("Both arms and number_of_arms given; ignoring number_of_arms={}", number_of_arms)
        return FromStats(arms=arms)
    if number_of_arms is not None:
        return EmptyCount(n=number_of_arms)
    raise InvalidConfiguration("Either arms or number_of_arms must be provided")


def load_config(data: Mapping[str, Any]) -> BanditConfig:
    if not isinstance(data, Mapping):
        raise InvalidConfiguration(f"Bandit config must be a mapping, got {type(data).__name__}")
    unknown = set(data) - CONFIG_KEYS
    if unknown:
        raise InvalidConfiguration(f"Unknown bandit config keys {sorted(unknown)}")
    return resolve_config(arms=data.get("arms"), number_of_arms=data.get("number_of_arms"))


def load_config_file(path: Union[str, Path]) -> BanditConfig:
    target = Path(path)
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise InvalidConfiguration(f"Bandit config {target} does not exist") from exc
    except json.JSONDecodeError as exc:
        raise InvalidConfiguration(f"Bandit config {target} is not valid JSON: {exc}") from exc
    config = load_config(data)
    logger.info("Loaded bandit config from {}", target)
    return config
