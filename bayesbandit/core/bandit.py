"""Thompson-sampling bandit over Bernoulli arms with a Fisher-test stopping rule."""
from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

import pandas as pd

from bayesbandit.core.arm import Arm
from bayesbandit.core.config import BanditConfig, EmptyCount, FromStats, load_config
from bayesbandit.errors import InvalidConfiguration, InvalidParameter, NoArmsAvailable, NumericError
from bayesbandit.stats.fisher import ExactBinomial, MathBinomial, contingency_table, fisher_exact
from bayesbandit.stats.sampling import BetaSampler, NumpyBetaSampler
from bayesbandit.utils.logger import logger


class Bandit:
    """Ordered, fixed set of arms.

    An arm's index is its external identity: arms are never added, removed or
    reordered after construction. Dropping an arm means the caller stops routing
    to it; its statistics stay in place.

    Instances are not thread-safe. ``reward`` is a read-modify-write, so callers
    sharing a bandit across threads must hold one lock per bandit.
    """

    def __init__(
        self,
        config: BanditConfig,
        sampler: Optional[BetaSampler] = None,
        binomial: Optional[ExactBinomial] = None,
    ) -> None:
        if isinstance(config, FromStats):
            arms = tuple(Arm(trials=stats.trials, successes=stats.successes) for stats in config.arms)
        elif isinstance(config, EmptyCount):
            arms = tuple(Arm() for _ in range(config.n))
        else:
            raise InvalidConfiguration(f"Unsupported bandit config {config!r}")
        self._arms: Tuple[Arm, ...] = arms
        self.sampler: BetaSampler = sampler or NumpyBetaSampler()
        self.binomial: ExactBinomial = binomial or MathBinomial()
        logger.debug("Created bandit with {} arms", len(self._arms))

    @property
    def arms(self) -> Tuple[Arm, ...]:
        return self._arms

    def __len__(self) -> int:
        return len(self._arms)

    def arm(self, index: int) -> Arm:
        if not 0 <= index < len(self._arms):
            raise IndexError(f"Arm index {index} out of range for {len(self._arms)} arms")
        return self._arms[index]

    def reward(self, index: int, value: float) -> None:
        self.arm(index).reward(value)

    def reward_multiple(self, index: int, num_trials: int, total_value: float) -> None:
        self.arm(index).reward_multiple(num_trials, total_value)

    def _candidate_indices(self, candidates: Optional[Iterable[int]]) -> List[int]:
        if candidates is None:
            return list(range(len(self._arms)))
        indices = sorted(set(candidates))
        for index in indices:
            self.arm(index)
        return indices

    def select_arm(self, candidates: Optional[Iterable[int]] = None) -> int:
        """Thompson sampling: draw once from every candidate's posterior and return the argmax.

        Candidates are scanned in index order and the first maximum wins.
        """
        indices = self._candidate_indices(candidates)
        if not indices:
            raise NoArmsAvailable("No arms available for selection")
        chosen = -1
        best_sample = -math.inf
        samples: Dict[int, float] = {}
        for index in indices:
            sample = self._arms[index].sample(self.sampler)
            if not (math.isfinite(sample) and 0.0 <= sample <= 1.0):
                raise NumericError(f"Posterior sample {sample!r} for arm {index} is outside [0, 1]")
            samples[index] = sample
            if sample > best_sample:
                best_sample = sample
                chosen = index
        logger.debug("Thompson samples {} -> chosen {}", samples, chosen)
        return chosen

    def check_convergence(self, alpha: float) -> Set[int]:
        """Indices of arms significantly worse than the best arm at level ``alpha``.

        The best arm has the highest success rate (first index on ties). Every
        other arm is compared to it with :func:`fisher_exact` on
        ``[[s_best, s_i], [f_best, f_i]]`` and dropped when ``p <= alpha``.
        The best arm is never in the result. Any arm with zero trials raises
        :class:`~bayesbandit.errors.DivisionByZero`.
        """
        if not 0 < alpha <= 1:
            raise InvalidParameter(f"Significance level alpha={alpha!r} must lie in (0, 1]")
        if len(self._arms) <= 1:
            return set()

        rates = [arm.success_rate() for arm in self._arms]
        best = 0
        for index, rate in enumerate(rates):
            if rate > rates[best]:
                best = index
        best_arm = self._arms[best]

        dropped: Set[int] = set()
        for index, arm in enumerate(self._arms):
            if index == best:
                continue
            table = contingency_table((best_arm.successes, best_arm.failures), (arm.successes, arm.failures))
            p_value = fisher_exact(table, binomial=self.binomial)
            logger.debug("Arm {} vs best arm {}: table={} p={:.3g}", index, best, table, p_value)
            if p_value <= alpha:
                dropped.add(index)
        if dropped:
            logger.info("Arms {} are significantly worse than arm {} at alpha={}", sorted(dropped), best, alpha)
        return dropped

    def snapshot(self) -> List[Dict[str, Any]]:
        """Arm statistics in the same shape :func:`create_bandit` accepts."""
        return [arm.to_dict() for arm in self._arms]

    def summary(self) -> pd.DataFrame:
        frame = pd.DataFrame(
            {
                "trials": [arm.trials for arm in self._arms],
                "successes": [arm.successes for arm in self._arms],
                "failures": [arm.failures for arm in self._arms],
            }
        )
        frame["success_rate"] = frame["successes"] / frame["trials"].where(frame["trials"] > 0)
        frame.index.name = "arm"
        return frame


def create_bandit(
    arms_or_count: Union[int, Sequence[Any], Mapping[str, Any], FromStats, EmptyCount],
    sampler: Optional[BetaSampler] = None,
    binomial: Optional[ExactBinomial] = None,
) -> Bandit:
    """Build a bandit from an arm count, a list of arm statistics, a config mapping or a config object."""
    if isinstance(arms_or_count, (FromStats, EmptyCount)):
        config: BanditConfig = arms_or_count
    elif isinstance(arms_or_count, Mapping):
        config = load_config(arms_or_count)
    elif isinstance(arms_or_count, numbers.Integral) and not isinstance(arms_or_count, bool):
        config = EmptyCount(n=int(arms_or_count))
    elif isinstance(arms_or_count, (list, tuple)):
        config = FromStats(arms=arms_or_count)
    else:
        raise InvalidConfiguration(f"Cannot build a bandit from {arms_or_count!r}")
    return Bandit(config, sampler=sampler, binomial=binomial)
