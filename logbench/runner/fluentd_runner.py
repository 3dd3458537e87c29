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

import codecs
import logging
import signal
import subprocess
import tempfile
from typing import List, Optional, Sequence

from logbench.errors import SpawnFailure
from logbench.utils.env import clean_env

logger = logging.getLogger(__name__)


class FluentdRunner:
    """
    A fluentd process whose combined stdout/stderr goes to a private temp file.

    The child writes through its own file handle while ``read_logs`` reads
    through ``self.log``, so each read picks up where the previous one stopped.
    """

    def __init__(self, conf: str, command_prefix: Sequence[str] = ('bundle', 'exec'),
                 command: Optional[List[str]] = None):
        """
        :param conf: Path to the fluentd configuration file
        :param command_prefix: Words placed before `fluentd` on the command line
        :param command: Full command line, overrides conf and command_prefix
        """
        self.conf = conf
        if command is None:
            command = list(command_prefix) + ['fluentd', '-c', conf]
        self.command = command

        self.log = tempfile.NamedTemporaryFile(prefix='fluentd-benchmark', suffix='.log')
        # a character split across two reads is decoded once both halves are in
        self.decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        try:
            with open(self.log.name, 'ab') as child_out:
                self.process = subprocess.Popen(
                    self.command,
                    stdout=child_out,
                    stderr=subprocess.STDOUT,
                    env=clean_env()
                )
        except OSError as e:
            self.log.close()
            raise SpawnFailure(f"Failed to spawn {' '.join(self.command)}: {e}") from e

        logger.info(f"Started fluentd (PID: {self.process.pid}) with {conf}, logging to {self.log.name}")

    @property
    def pid(self) -> int:
        return self.process.pid

    def stop(self):
        """Terminate, reap and drop the output file. Call at most once."""
        logger.info(f"Stopping fluentd (PID: {self.process.pid})")
        self.process.send_signal(signal.SIGTERM)
        returncode = self.process.wait()
        logger.debug(f"fluentd (PID: {self.process.pid}) exited with status {returncode}")
        self.log.close()

    def read_logs(self) -> str:
        """Output appended since the previous call."""
        return self.decoder.decode(self.log.read())
