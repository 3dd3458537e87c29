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

# 解析 receiver 的 out_flowcounter_simple 输出
"""Parse the periodic count lines written by fluentd's out_flowcounter_simple plugin."""

import re
from typing import List, Optional

# e.g. "2024-01-01 00:00:00 +0000 [info]: plugin:out_flowcounter_simple count:120 ..."
FLOWCOUNTER_PATTERN = re.compile(r'plugin:out_flowcounter_simple\s+count:(\d+)')


def parse_counts(logs: str) -> List[int]:
    """Every count reported in ``logs``, in order of appearance."""
    return [int(match) for match in FLOWCOUNTER_PATTERN.findall(logs)]


def parse_max_count(logs: str) -> Optional[int]:
    """
    Highest count reported in ``logs``.

    The plugin flushes periodically and the last flush of a window is usually a
    partial one, so the peak is taken rather than the last value.

    :param logs: Receiver output for one measurement window
    :return: The maximum count, or None when no count line is present
    """
    counts = parse_counts(logs)
    if not counts:
        return None
    return max(counts)
