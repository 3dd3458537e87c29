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
import time

from .bench_configuration import BenchConfiguration
from .runner.dummer_runner import DummerRunner
from .runner.fluentd_runner import FluentdRunner
from .runner.generator_runner import GeneratorRunner
from .utils.flowcounter import parse_max_count

logger = logging.getLogger(__name__)


class Benchmarker:
    """
    One generator and two forwarder stages (agent -> receiver).

    Use as a context manager: leaving the block stops both forwarders exactly
    once, whatever the exit path.
    """

    MEASURE_DURATION = 5

    def __init__(self, generator: GeneratorRunner, agent: FluentdRunner, receiver: FluentdRunner,
                 measure_duration: float = MEASURE_DURATION):
        self.generator = generator
        self.agent = agent
        self.receiver = receiver
        self.measure_duration = measure_duration
        self.closed = False

    @classmethod
    def from_configuration(cls, config: BenchConfiguration) -> 'Benchmarker':
        """Spawn both forwarders for ``config``. A spawned agent is stopped if the receiver fails."""
        generator = DummerRunner(
            config.generator_config,
            command_prefix=config.command_prefix,
            poll_interval=config.stop_poll_interval_seconds,
            max_attempts=config.stop_max_attempts
        )
        agent = FluentdRunner(config.agent_config, command_prefix=config.command_prefix)
        try:
            receiver = FluentdRunner(config.receiver_config, command_prefix=config.command_prefix)
        except BaseException:
            agent.stop()
            raise

        return cls(generator, agent, receiver, config.measure_duration_seconds)

    def measure_throughput(self, rate: int) -> int:
        """
        Measure lines/sec delivered to the receiver for a generation rate.

        :param rate: messages/sec the generator is asked to emit
        :return: lines/sec, 0 when the receiver reported no count in the window
        """
        # 丢弃上一轮之后积累的无关日志
        self.receiver.read_logs()

        self.generator.start(rate)
        time.sleep(self.measure_duration)
        self.generator.stop()

        logs = self.receiver.read_logs()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Receiver output for {rate} messages/s:\n----------\n{logs}----------")

        sample = parse_max_count(logs)
        if sample is None:
            logger.warning(f"No flowcounter output from the receiver at {rate} messages/s, counting it as 0")
            return 0
        return sample

    def close(self):
        """Stop agent then receiver. Later calls do nothing."""
        if self.closed:
            return
        self.closed = True

        try:
            self.agent.stop()
        finally:
            self.receiver.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
