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

import argparse
import json
import logging
import signal
import sys
import yaml
from pathlib import Path
from datetime import datetime
from typing import List
from logbench.bench_configuration import BenchConfiguration
from logbench.benchmarker import Benchmarker
from logbench.errors import BenchmarkError
from logbench.rate_search import RateSearch
from logbench.results_to_csv import ResultsToCsv

logger = logging.getLogger(__name__)

#   程序接受这些参数：
#   - -f / --bench-file：bench 配置文件（yaml）
#   - -a / -r / -g：agent、receiver、dummer 的配置文件，会覆盖 bench 文件里的值
#   - -c / --csv：把某个目录下的结果转换成 CSV

#   例子：
#   python -m logbench -a agent.conf -r receiver.conf -g dummer.conf --dummy-log dummy.log


class Benchmark:
    """Find the maximum sustainable rate of a dummer -> fluentd -> fluentd pipeline."""

    @staticmethod
    def main(args: List[str] = None) -> int:
        """Main entry point."""
        if args is None:
            args = sys.argv[1:]

        parser = argparse.ArgumentParser(prog="logbench")
        parser.add_argument(
            "-c", "--csv",
            dest="results_dir",
            help="Print results from this directory to a csv file"
        )
        parser.add_argument(
            "-f", "--bench-file",
            dest="bench_file",
            help="Path to a YAML file describing the benchmark"
        )
        parser.add_argument(
            "-a", "--agent-config",
            dest="agent_config",
            help="fluentd configuration of the forwarding agent"
        )
        parser.add_argument(
            "-r", "--receiver-config",
            dest="receiver_config",
            help="fluentd configuration of the receiver (with out_flowcounter_simple)"
        )
        parser.add_argument(
            "-g", "--generator-config",
            dest="generator_config",
            help="dummer configuration"
        )
        parser.add_argument(
            "--dummy-log",
            dest="dummy_log",
            help="Log file written by dummer, removed before the run"
        )
        parser.add_argument(
            "--initial-rate",
            dest="initial_rate",
            type=int,
            help="First rate (messages/s) of the ramp"
        )
        parser.add_argument(
            "--duration",
            dest="measure_duration",
            type=float,
            help="Seconds each rate is measured for"
        )
        parser.add_argument(
            "-o", "--output",
            help="Write the search result into this JSON file"
        )
        parser.add_argument(
            "-v", "--verbose",
            action="store_true",
            help="Log receiver output and stop polling"
        )

        arguments = parser.parse_args(args)

        if arguments.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        if arguments.results_dir is not None:
            r = ResultsToCsv()
            return 0 if r.write_all_result_files(arguments.results_dir) else 1

        config = Benchmark._load_configuration(arguments)
        missing = config.missing()
        if missing:
            parser.error(f"missing configuration: {', '.join(missing)}")

        logger.info(f"Starting benchmark with config: {json.dumps(vars(config), indent=2)}")

        if config.dummy_log is not None:
            dummy_log = Path(config.dummy_log)
            if dummy_log.exists():
                logger.info(f"Removing old dummy log {dummy_log}")
                dummy_log.unlink()

        # SIGTERM 也要走 finally，保证 fluentd 进程被停止
        previous_handler = signal.signal(signal.SIGTERM, Benchmark._terminate)

        try:
            with Benchmarker.from_configuration(config) as bench:
                search = RateSearch(
                    bench.measure_throughput,
                    initial_rate=config.initial_rate,
                    measure_duration=config.measure_duration_seconds
                )
                result = search.search()
        except BenchmarkError as e:
            logger.error(f"Benchmark '{config.name}' failed", exc_info=e)
            return 1
        finally:
            signal.signal(signal.SIGTERM, previous_handler)

        result.name = config.name

        print()
        print(f"best result: {result.best_sample} lines/s (under {result.best_rate} messages/s)")

        if arguments.output:
            file_name = arguments.output
        else:
            file_name = f"{config.name}-{datetime.now().strftime('%Y-%m-%d-%H-%M-%S')}.json"

        logger.info(f"Writing search result into {file_name}")
        with open(file_name, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)

        return 0

    @staticmethod
    def _load_configuration(arguments: argparse.Namespace) -> BenchConfiguration:
        """Bench file values first, then command line overrides."""
        if arguments.bench_file is not None:
            bench_file = Path(arguments.bench_file)
            logger.info(f"Reading benchmark configuration from {bench_file}")
            with open(bench_file, 'r') as f:
                data = yaml.safe_load(f) or {}
            config = BenchConfiguration.from_dict(data, base_dir=bench_file.parent)
        else:
            config = BenchConfiguration()

        for attribute in ('agent_config', 'receiver_config', 'generator_config', 'dummy_log', 'initial_rate'):
            value = getattr(arguments, attribute)
            if value is not None:
                setattr(config, attribute, value)

        if arguments.measure_duration is not None:
            config.measure_duration_seconds = arguments.measure_duration

        return config

    @staticmethod
    def _terminate(signum, frame):
        logger.warning(f"Received signal {signum}, stopping forwarders")
        sys.exit(128 + signum)


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    sys.exit(Benchmark.main())
