import pytest

from logbench.errors import UnexpectedSearchResult
from logbench.rate_search import RateSearch, SearchState
from logbench.search_result import BISECT, RAMP


class TableMeasure:
    """Samples looked up from a dict, remembering the rates asked for."""

    def __init__(self, table: dict):
        self.table = table
        self.rates = []

    def __call__(self, rate: int) -> int:
        self.rates.append(rate)
        return self.table[rate]


def peak_at(peak: int):
    """Strictly unimodal throughput curve with its maximum at ``peak``."""
    def measure(rate: int) -> int:
        return 1_000_000_000 // (1 + abs(rate - peak))
    return measure


def test_initial_rate_must_be_positive():
    with pytest.raises(ValueError):
        RateSearch(lambda rate: 0, initial_rate=0)


def test_ramp_brackets_first_regression():
    measure = TableMeasure({1000: 500, 10000: 4000, 100000: 3000})
    search = RateSearch(measure)

    state = search.ramp()

    assert state == SearchState(best_rate=10000, best_sample=4000, second_rate=100000, second_sample=3000)
    assert measure.rates == [1000, 10000, 100000]
    assert search.step_for(state) == 9000


@pytest.mark.parametrize(
    "samples,expected_measurements",
    [
        ([0], 1),
        ([5, 5], 2),
        ([5, 4], 2),
        ([1, 2, 3, 3], 4),
        ([10, 20, 30, 40, 1], 5),
    ],
)
def test_ramp_stops_at_first_non_improving_sample(samples, expected_measurements):
    it = iter(samples)
    search = RateSearch(lambda rate: next(it))

    state = search.ramp()

    assert len(search.steps) == expected_measurements
    assert all(step.phase == RAMP for step in search.steps)
    assert state.second_rate == 10 * state.best_rate
    assert state.second_rate == search.steps[-1].rate
    assert state.second_sample == samples[expected_measurements - 1]


def test_ramp_with_saturating_curve():
    search = RateSearch(lambda rate: min(rate, 20000))

    state = search.ramp()

    assert [step.rate for step in search.steps] == [1000, 10000, 100000, 1000000]
    assert state == SearchState(100000, 20000, 1000000, 20000)


def test_constant_positive_curve_ramps_twice():
    search = RateSearch(lambda rate: 42)

    state = search.ramp()

    assert [step.rate for step in search.steps] == [1000, 10000]
    assert state == SearchState(1000, 42, 10000, 42)


def test_constant_zero_curve_ends_ramp_immediately():
    search = RateSearch(lambda rate: 0)

    state = search.ramp()

    assert len(search.steps) == 1
    assert state == SearchState(100, 0, 1000, 0)

    result = search.search()

    # the first midpoint is no better than either end
    assert not result.converged
    assert result.best_rate == 100
    assert result.best_sample == 0
    assert [step.rate for step in result.steps] == [1000, 550]


def test_bisect_narrows_towards_peak():
    table = {
        1000: 1000, 10000: 10000, 100000: 0,
        55000: 5000, 32500: 27500, 21250: 21250,
    }
    measure = TableMeasure(table)
    search = RateSearch(measure)

    result = search.search()

    assert result.converged
    assert result.best_rate == 32500
    assert result.best_sample == 27500
    assert result.min_step == 9000
    assert measure.rates == [1000, 10000, 100000, 55000, 32500, 21250]
    assert [step.phase for step in result.steps] == [RAMP] * 3 + [BISECT] * 3


def test_bisect_keeps_min_step_fixed():
    search = RateSearch(peak_at(42000))
    state = SearchState(10000, 31249, 100000, 17241)

    final = search.bisect(state)

    assert search.min_step == 9000
    assert [step.rate for step in search.steps] == [55000, 32500, 43750]
    assert final.best_rate == 43750
    assert final.second_rate == 32500


def test_bisect_does_not_mutate_input_state():
    state = SearchState(10000, 31249, 100000, 17241)
    RateSearch(peak_at(42000)).bisect(state)
    assert state == SearchState(10000, 31249, 100000, 17241)


@pytest.mark.parametrize("peak", [1500, 3000, 25000, 42000, 70000, 99000, 640000])
def test_bisect_stays_inside_initial_bracket(peak):
    search = RateSearch(peak_at(peak))
    state = search.ramp()
    low, high = sorted((state.best_rate, state.second_rate))

    search.steps = []
    search.bisect(state)
    test_rates = [step.rate for step in search.steps]

    assert all(low <= rate <= high for rate in test_rates)

    # each midpoint is half a bracket away from the previous one
    moves = [abs(b - a) for a, b in zip(test_rates, test_rates[1:])]
    assert moves == sorted(moves, reverse=True)

    # the width halves each round, a tenth of the bracket needs a handful of rounds
    assert len(test_rates) <= 5


@pytest.mark.parametrize("peak", [3000, 25000, 42000])
def test_search_converges_near_peak(peak):
    result = RateSearch(peak_at(peak)).search()

    assert result.converged
    bracket = 10 ** len(str(peak))
    assert abs(result.best_rate - peak) <= bracket // 10


def test_bisect_raises_on_sample_worse_than_both_ends():
    measure = TableMeasure({55000: 200})
    search = RateSearch(measure)
    state = SearchState(10000, 1000, 100000, 500)

    with pytest.raises(UnexpectedSearchResult) as excinfo:
        search.bisect(state)

    assert excinfo.value.state == state
    assert excinfo.value.test_rate == 55000
    assert excinfo.value.test_sample == 200
    assert measure.rates == [55000]


def test_search_reports_previous_best_on_unexpected_result():
    measure = TableMeasure({1000: 100, 10000: 1000, 100000: 500, 55000: 200})

    result = RateSearch(measure).search()

    assert not result.converged
    assert result.best_rate == 10000
    assert result.best_sample == 1000
    assert result.samples() == [100, 1000, 500, 200]


def test_search_records_measure_duration():
    result = RateSearch(lambda rate: 0, measure_duration=0.5).search()
    assert result.measure_duration_seconds == 0.5
