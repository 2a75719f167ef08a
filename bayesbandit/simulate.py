"""Offline simulation of the bandit against Bernoulli arms with known rates."""
from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from bayesbandit.core.bandit import Bandit
from bayesbandit.core.config import EmptyCount
from bayesbandit.errors import BanditError, InvalidConfiguration
from bayesbandit.stats.sampling import NumpyBetaSampler
from bayesbandit.utils.logger import configure_logging, logger

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
DEFAULT_SETTINGS = CONFIG_DIR / "simulation.json"


@dataclass
class SimulationSettings:
    rates: List[float]
    rounds: int = 20000
    alpha: float = 0.01
    check_every: int = 1000
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.rates = [float(rate) for rate in self.rates]
        if not self.rates:
            raise InvalidConfiguration("At least one arm rate is required")
        if any(not 0.0 <= rate <= 1.0 for rate in self.rates):
            raise InvalidConfiguration(f"Arm rates {self.rates} must lie in [0, 1]")
        if self.rounds < 0:
            raise InvalidConfiguration(f"rounds must be non-negative, got {self.rounds}")
        if self.check_every <= 0:
            raise InvalidConfiguration(f"check_every must be positive, got {self.check_every}")
        if not 0 < self.alpha <= 1:
            raise InvalidConfiguration(f"alpha must lie in (0, 1], got {self.alpha}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfiguration(f"Unknown simulation settings {sorted(unknown)}")
        return cls(**data)


@dataclass
class SimulationResult:
    summary: pd.DataFrame
    dropped: Dict[int, int] = field(default_factory=dict)
    rounds_played: int = 0
    regret: float = 0.0


def load_settings(path: Optional[Path] = None) -> SimulationSettings:
    target = Path(path or DEFAULT_SETTINGS)
    data = json.loads(target.read_text(encoding="utf-8"))
    logger.debug("Loaded simulation settings from {}", target)
    return SimulationSettings.from_dict(data)


def run_simulation(settings: SimulationSettings) -> SimulationResult:
    """Play ``settings.rounds`` Thompson-sampling rounds, retiring arms as they are found worse.

    Arms in the drop set stop receiving traffic. The convergence check is skipped
    while any arm is still untried, since its success rate is undefined.
    """
    sampler_seed, env_seed = np.random.SeedSequence(settings.seed).spawn(2)
    bandit = Bandit(EmptyCount(n=len(settings.rates)), sampler=NumpyBetaSampler(rng=np.random.default_rng(sampler_seed)))
    env = np.random.default_rng(env_seed)
    best_rate = max(settings.rates)

    live = set(range(len(bandit)))
    dropped: Dict[int, int] = {}
    regret = 0.0
    rounds_played = 0
    logger.info("Simulating {} rounds over rates {}", settings.rounds, settings.rates)
    for round_no in range(1, settings.rounds + 1):
        chosen = bandit.select_arm(candidates=live)
        bandit.reward(chosen, float(env.random() < settings.rates[chosen]))
        regret += best_rate - settings.rates[chosen]
        rounds_played = round_no

        if round_no % settings.check_every:
            continue
        if any(arm.trials == 0 for arm in bandit.arms):
            logger.debug("Round {}: skipping convergence check, some arms are untried", round_no)
            continue
        to_drop = bandit.check_convergence(settings.alpha) & live
        if to_drop == live:
            # the overall best is an already-retired arm; keep the strongest live one
            to_drop.discard(max(sorted(live), key=lambda index: bandit.arm(index).success_rate()))
        for index in sorted(to_drop):
            live.discard(index)
            dropped[index] = round_no
            logger.info("Round {}: dropped arm {} (true rate {})", round_no, index, settings.rates[index])
        if to_drop and len(live) == 1:
            logger.info("Round {}: converged on arm {}", round_no, next(iter(live)))
            break

    summary = bandit.summary()
    summary["true_rate"] = settings.rates
    summary["dropped_at"] = pd.Series(dropped, dtype="Int64").reindex(summary.index)
    return SimulationResult(summary=summary, dropped=dropped, rounds_played=rounds_played, regret=regret)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate Thompson sampling with Fisher-test arm retirement")
    parser.add_argument("--config", type=Path, default=DEFAULT_SETTINGS)
    parser.add_argument("--rates", type=float, nargs="+")
    parser.add_argument("--rounds", type=int)
    parser.add_argument("--alpha", type=float)
    parser.add_argument("--check-every", type=int, dest="check_every")
    parser.add_argument("--seed", type=int)
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", type=Path)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    try:
        settings = load_settings(args.config)
        overrides = {
            name: getattr(args, name)
            for name in ("rates", "rounds", "alpha", "check_every", "seed")
            if getattr(args, name) is not None
        }
        if overrides:
            settings = SimulationSettings.from_dict({**asdict(settings), **overrides})
        result = run_simulation(settings)
    except (BanditError, OSError, json.JSONDecodeError) as exc:
        logger.error("Simulation failed: {}", exc)
        return 1
    print(result.summary.to_string())
    logger.info("Played {} rounds, cumulative regret {:.2f}", result.rounds_played, result.regret)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
