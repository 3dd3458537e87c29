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
import re
import subprocess
import time
from typing import List, Optional, Sequence

from logbench.errors import StartFailure, StopFailure, StopTimeout
from logbench.runner.generator_runner import GeneratorRunner
from logbench.utils.env import clean_env
from logbench.utils.timer import Timer

logger = logging.getLogger(__name__)


class DummerRunner(GeneratorRunner):
    """Drives the `dummer` log generator through its start/stop commands."""

    # `dummer stop` prints this once the daemon is gone
    NOT_RUNNING_PATTERN = re.compile(r'Dummer \d+ not running\n')

    def __init__(self, conf: str, command_prefix: Sequence[str] = ('bundle', 'exec'),
                 poll_interval: float = 1.0, max_attempts: Optional[int] = None):
        """
        :param conf: Path to the dummer configuration file
        :param command_prefix: Words placed before `dummer` on every command line
        :param poll_interval: Seconds to wait between two stop polls
        :param max_attempts: Bound on stop polls, None (or 0) polls until confirmed
        """
        self.conf = conf
        self.command_prefix = list(command_prefix)
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts or None

    def _command(self, *args: str) -> List[str]:
        return self.command_prefix + ['dummer', *args]

    def start(self, rate: int):
        command = self._command('start', '-c', self.conf, '-r', str(rate), '-d')
        logger.debug(f"Starting dummer: {' '.join(command)}")
        try:
            result = subprocess.run(command, stdout=subprocess.DEVNULL, env=clean_env())
        except OSError as e:
            raise StartFailure(f"Failed to start dummer!: {e}") from e

        if result.returncode != 0:
            raise StartFailure(f"Failed to start dummer! (exit status {result.returncode})")

    def stop(self):
        timer = Timer()
        attempts = 0
        while True:
            attempts += 1
            output = self._run_stop()
            if self.NOT_RUNNING_PATTERN.fullmatch(output):
                break

            logger.debug(f"dummer still stopping (attempt {attempts}): {output.strip()!r}")
            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise StopTimeout(attempts, output)
            time.sleep(self.poll_interval)

        logger.debug(f"dummer stopped after {attempts} attempts in {timer.elapsed_millis():.0f} ms")

    def _run_stop(self) -> str:
        try:
            result = subprocess.run(
                self._command('stop'),
                stdout=subprocess.PIPE,
                universal_newlines=True,
                env=clean_env()
            )
        except OSError as e:
            raise StopFailure(f"Failed to stop dummer!: {e}") from e

        if result.returncode != 0:
            raise StopFailure(f"Failed to stop dummer!: {result.stdout}", result.stdout)
        return result.stdout
