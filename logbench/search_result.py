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

# 一次速率搜索的结果
from dataclasses import dataclass
from typing import List


RAMP = 'ramp'
BISECT = 'bisect'


@dataclass
class SearchStep:
    phase: str
    rate: int
    sample: int


class SearchResult:

    def __init__(self):
        self.name = None
        self.best_rate = 0
        self.best_sample = 0

        # False when bisection stopped on a sample worse than both bracket ends
        self.converged = True

        self.min_step = 0
        self.measure_duration_seconds = 0.0
        self.elapsed_seconds = 0.0
        self.steps: List[SearchStep] = []

    def samples(self) -> List[int]:
        return [step.sample for step in self.steps]

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'bestRate': self.best_rate,
            'bestSample': self.best_sample,
            'converged': self.converged,
            'minStep': self.min_step,
            'measureDurationSeconds': self.measure_duration_seconds,
            'elapsedSeconds': self.elapsed_seconds,
            'steps': [
                {'phase': step.phase, 'rate': step.rate, 'sample': step.sample}
                for step in self.steps
            ],
        }

    @staticmethod
    def from_dict(data: dict) -> 'SearchResult':
        result = SearchResult()
        result.name = data.get('name')
        result.best_rate = data.get('bestRate', 0)
        result.best_sample = data.get('bestSample', 0)
        result.converged = data.get('converged', True)
        result.min_step = data.get('minStep', 0)
        result.measure_duration_seconds = data.get('measureDurationSeconds', 0.0)
        result.elapsed_seconds = data.get('elapsedSeconds', 0.0)
        result.steps = [
            SearchStep(step.get('phase'), step.get('rate', 0), step.get('sample', 0))
            for step in data.get('steps', [])
        ]
        return result
