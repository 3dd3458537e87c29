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

from pathlib import Path
from typing import Optional

from .utils.env import Env


class BenchConfiguration:

    def __init__(self):
        self.name = 'logbench'

        # fluentd configuration of the forwarding agent (tails the dummy log)
        self.agent_config = None

        # fluentd configuration of the receiver (runs out_flowcounter_simple)
        self.receiver_config = None

        # dummer configuration of the generator
        self.generator_config = None

        # File written by the generator and tailed by the agent, removed before the run
        self.dummy_log = None

        self.command_prefix = Env.get_str('COMMAND_PREFIX', 'bundle exec').split()

        self.initial_rate = Env.get_long('INITIAL_RATE', 1000)

        self.measure_duration_seconds = Env.get_double('MEASURE_DURATION_SECONDS', 5.0)

        self.stop_poll_interval_seconds = Env.get_double('STOP_POLL_INTERVAL_SECONDS', 1.0)

        # 0 means poll `dummer stop` until it confirms
        self.stop_max_attempts = Env.get_long('STOP_MAX_ATTEMPTS', 0)

    def missing(self) -> list:
        """Names of the required configuration paths that are not set."""
        required = {
            'agentConfig': self.agent_config,
            'receiverConfig': self.receiver_config,
            'generatorConfig': self.generator_config,
        }
        return [key for key, value in required.items() if not value]

    @staticmethod
    def from_dict(data: dict, base_dir: Optional[Path] = None) -> 'BenchConfiguration':
        """
        Build a configuration from a bench file's content.

        :param data: Parsed YAML mapping with camelCase keys
        :param base_dir: Directory relative paths are resolved against
        """
        config = BenchConfiguration()

        def path(key: str) -> Optional[str]:
            value = data.get(key)
            if value is None:
                return None
            p = Path(value).expanduser()
            if base_dir is not None and not p.is_absolute():
                p = base_dir / p
            return str(p)

        config.name = data.get('name', config.name)
        config.agent_config = path('agentConfig')
        config.receiver_config = path('receiverConfig')
        config.generator_config = path('generatorConfig')
        config.dummy_log = path('dummyLog')

        command_prefix = data.get('commandPrefix', config.command_prefix)
        if isinstance(command_prefix, str):
            command_prefix = command_prefix.split()
        config.command_prefix = list(command_prefix)

        config.initial_rate = int(data.get('initialRate', config.initial_rate))
        config.measure_duration_seconds = float(data.get('measureDurationSeconds', config.measure_duration_seconds))
        config.stop_poll_interval_seconds = float(
            data.get('stopPollIntervalSeconds', config.stop_poll_interval_seconds)
        )
        config.stop_max_attempts = int(data.get('stopMaxAttempts', config.stop_max_attempts))

        return config
