# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .errors import UnexpectedSearchResult
from .search_result import BISECT, RAMP, SearchResult, SearchStep
from .utils.timer import Timer

logger = logging.getLogger(__name__)


@dataclass
class SearchState:
    """The best rate/sample pair so far and the runner-up that bounds it."""
    best_rate: int
    best_sample: int
    second_rate: int
    second_sample: int


class RateSearch:
    """
    Find the generation rate with the highest delivered throughput.

    Phase 1 multiplies the rate by ten until the sample stops improving, which
    brackets the optimum between the last improving rate and the first one
    that regressed. Phase 2 bisects that bracket until the midpoint moves by
    less than a tenth of the initial bracket width.

    The measurements are noisy and the curve is assumed unimodal. A bisection
    sample worse than both bracket ends breaks that assumption, so the search
    stops there and keeps what it has.
    """

    INITIAL_RATE = 1000
    RAMP_FACTOR = 10
    STEP_DIVISOR = 10

    def __init__(self, measure: Callable[[int], int], initial_rate: int = INITIAL_RATE,
                 measure_duration: Optional[float] = None):
        """
        :param measure: Returns the sample (lines/sec) observed at a rate (messages/sec)
        :param initial_rate: First rate tried by the ramp
        :param measure_duration: Seconds per measurement, only used in progress lines
        """
        if initial_rate < 1:
            raise ValueError(f"Initial rate must be a positive number of messages/s, got {initial_rate}")

        self.measure = measure
        self.initial_rate = initial_rate
        self.measure_duration = measure_duration

        self.min_step = 0
        self.steps: List[SearchStep] = []

    def _measure(self, phase: str, rate: int) -> int:
        if self.measure_duration is not None:
            logger.info(f"benchmarking with the rate: {rate} messages/s... ({self.measure_duration:g}s)")
        else:
            logger.info(f"benchmarking with the rate: {rate} messages/s...")

        sample = self.measure(rate)
        logger.info(f"  => {sample} lines/s")

        self.steps.append(SearchStep(phase, rate, sample))
        return sample

    def ramp(self) -> SearchState:
        """
        Try initial_rate, 10x, 100x, ... until a sample does not beat the best one.

        :return: State whose second rate is the first regressing rate and whose
                 best rate is the one just before it
        """
        rate = self.initial_rate
        best_sample = 0

        while True:
            sample = self._measure(RAMP, rate)
            if sample > best_sample:
                best_sample = sample
                rate *= self.RAMP_FACTOR
            else:
                second_sample = sample
                break

        state = SearchState(rate // self.RAMP_FACTOR, best_sample, rate, second_sample)
        logger.info(f"Ramp finished, bracket is [{state.best_rate}, {state.second_rate}] messages/s")
        return state

    def step_for(self, state: SearchState) -> int:
        """Convergence tolerance: a tenth of the bracket width, at least 1 message/s."""
        return max(1, abs(state.second_rate - state.best_rate) // self.STEP_DIVISOR)

    def bisect(self, state: SearchState) -> SearchState:
        """
        Narrow the bracket by repeated midpoints.

        The tolerance is derived once from the incoming bracket and kept for the
        whole phase.

        :raises UnexpectedSearchResult: when a midpoint sample is worse than
            both ends; ``state`` on the exception is the last consistent one
        """
        best_rate, best_sample = state.best_rate, state.best_sample
        second_rate, second_sample = state.second_rate, state.second_sample

        self.min_step = self.step_for(state)
        logger.info(f"Bisecting [{best_rate}, {second_rate}] messages/s with a step of {self.min_step}")

        while True:
            test_rate = (best_rate + second_rate) // 2
            if abs(best_rate - test_rate) < self.min_step:
                break

            test_sample = self._measure(BISECT, test_rate)

            if test_sample > best_sample:
                # test_rate > best_rate > second_rate
                best_rate, second_rate = test_rate, best_rate
                best_sample, second_sample = test_sample, best_sample
            elif test_sample > second_sample:
                # best_rate > test_rate > second_rate
                second_rate, second_sample = test_rate, test_sample
            else:
                raise UnexpectedSearchResult(
                    SearchState(best_rate, best_sample, second_rate, second_sample), test_rate, test_sample
                )

        return SearchState(best_rate, best_sample, second_rate, second_sample)

    def search(self) -> SearchResult:
        """Run both phases and report the best rate found."""
        timer = Timer()
        self.steps = []

        state = self.ramp()
        converged = True
        try:
            state = self.bisect(state)
        except UnexpectedSearchResult as e:
            logger.warning(f"{e}... stopping")
            state = e.state
            converged = False

        result = SearchResult()
        result.best_rate = state.best_rate
        result.best_sample = state.best_sample
        result.converged = converged
        result.min_step = self.min_step
        result.steps = list(self.steps)
        result.elapsed_seconds = timer.elapsed_seconds()
        if self.measure_duration is not None:
            result.measure_duration_seconds = self.measure_duration

        logger.info(
            f"Search finished after {len(result.steps)} measurements in {result.elapsed_seconds:.1f} s"
        )
        return result
