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


class BenchmarkError(Exception):
    """Base class for every error raised by the benchmark."""


class SpawnFailure(BenchmarkError):
    """A forwarder process could not be launched."""


class StartFailure(BenchmarkError):
    """The generator control command reported a failed start."""


class StopFailure(BenchmarkError):
    """The generator stop command itself failed (not merely 'still running')."""

    def __init__(self, message: str, output: str = ''):
        super().__init__(message)
        self.output = output


class StopTimeout(StopFailure):
    """The generator did not confirm it stopped within the configured number of polls."""

    def __init__(self, attempts: int, output: str = ''):
        super().__init__(f"Generator still running after {attempts} stop attempts", output)
        self.attempts = attempts


class UnexpectedSearchResult(BenchmarkError):
    """
    A bisection sample was worse than both ends of the bracket.

    The search assumes a unimodal throughput curve; when that breaks it stops
    and keeps the best pair found so far, which is available as ``state``.
    """

    def __init__(self, state, test_rate: int, test_sample: int):
        super().__init__(
            f"unexpected result: {test_sample} lines/s at {test_rate} messages/s is worse than "
            f"both {state.best_sample} and {state.second_sample}"
        )
        self.state = state
        self.test_rate = test_rate
        self.test_sample = test_sample
