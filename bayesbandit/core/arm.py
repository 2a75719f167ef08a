"""Per-arm sufficient statistics and posterior sampling."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from bayesbandit.errors import DivisionByZero, InvalidParameter
from bayesbandit.stats.sampling import BetaSampler, NumpyBetaSampler
from bayesbandit.utils.logger import logger


@dataclass
class Arm:
    """Bernoulli reward process under a uniform Beta(1, 1) prior."""

    trials: int = 0
    successes: float = 0.0

    def reward(self, value: float) -> None:
        self.trials += 1
        self.successes += value
        logger.debug("Arm rewarded {} -> trials={} successes={}", value, self.trials, self.successes)

    def reward_multiple(self, num_trials: int, total_value: float) -> None:
        self.trials += num_trials
        self.successes += total_value
        logger.debug(
            "Arm rewarded {} over {} trials -> trials={} successes={}",
            total_value,
            num_trials,
            self.trials,
            self.successes,
        )

    @property
    def failures(self) -> float:
        return self.trials - self.successes

    def success_rate(self) -> float:
        if self.trials == 0:
            raise DivisionByZero("Success rate is undefined for an arm with zero trials")
        return self.successes / self.trials

    def posterior(self) -> Tuple[float, float]:
        """Shape parameters ``(1 + successes, 1 + failures)`` of the Beta posterior."""
        if self.successes < 0 or self.successes > self.trials:
            raise InvalidParameter(
                f"Arm has successes={self.successes} outside [0, trials={self.trials}]; posterior is undefined"
            )
        return 1.0 + self.successes, 1.0 + self.trials - self.successes

    def sample(self, sampler: Optional[BetaSampler] = None) -> float:
        alpha, beta = self.posterior()
        return (sampler or NumpyBetaSampler()).sample_beta(alpha, beta)

    def to_dict(self) -> Dict[str, Any]:
        return {"trials": self.trials, "successes": self.successes}
