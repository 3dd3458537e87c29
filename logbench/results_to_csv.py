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

import json
import logging
import os
import time
from pathlib import Path
from typing import List, Optional
from hdrh.histogram import HdrHistogram
from .search_result import SearchResult

logger = logging.getLogger(__name__)


class ResultsToCsv:

    HEADER = (
        "name,best-rate,best-sample,converged,measurements,"
        + "sample-min,sample-avg,sample-std-dev,sample-max"
    )

    def write_all_result_files(self, directory: str, output_file: Optional[str] = None) -> Optional[str]:
        """
        Collect every search result JSON file in a directory into one CSV file.

        :param directory: Directory holding the result files
        :param output_file: CSV path, defaults to results-<epoch>.csv in the working directory
        :return: The CSV path, or None when it could not be written
        """
        try:
            dir_path = Path(directory)
            if not dir_path.is_dir():
                raise ValueError(f"Not a directory: {directory}")

            results: List[SearchResult] = []
            for file_path in sorted(dir_path.iterdir()):
                if file_path.is_file() and file_path.suffix == ".json":
                    with open(file_path, 'r') as f:
                        results.append(SearchResult.from_dict(json.load(f)))

            sorted_results = sorted(results, key=lambda r: (r.name or '', r.best_rate))

            lines = [self.HEADER]
            for result in sorted_results:
                lines.append(self.extract_results(result))

            results_file_name = output_file or f"results-{int(time.time())}.csv"
            with open(results_file_name, 'w') as writer:
                for line in lines:
                    writer.write(line + os.linesep)

            logger.info(f"Results extracted into CSV {results_file_name}")
            return results_file_name

        except (IOError, ValueError) as e:
            logger.error(f"Failed creating csv file: {e}")
            return None

    def extract_results(self, result: SearchResult) -> str:
        samples = result.samples()
        line = (
            f"{result.name},"
            f"{result.best_rate},"
            f"{result.best_sample},"
            f"{str(result.converged).lower()},"
            f"{len(samples)},"
        )

        if not samples:
            return line + ",,,"

        # min/max are exact, the histogram only feeds the average and deviation
        sample_histogram = HdrHistogram(1, 1_000_000_000, 5)
        for sample in samples:
            sample_histogram.record_value(sample)

        return line + (
            f"{min(samples)},"
            f"{sample_histogram.get_mean_value():.0f},"
            f"{sample_histogram.get_stddev():.2f},"
            f"{max(samples)}"
        )
