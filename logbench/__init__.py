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

# logbench 包对外暴露的类

# 命令行主程序
from .benchmark import Benchmark

# bench 配置（yaml 文件 + 环境变量）
from .bench_configuration import BenchConfiguration

# 启动 dummer 和两个 fluentd，测一次吞吐量
from .benchmarker import Benchmarker

# 两阶段速率搜索：指数增长 + 二分
from .rate_search import RateSearch, SearchState

# 搜索结果
from .search_result import SearchResult, SearchStep

# 结果转 CSV
from .results_to_csv import ResultsToCsv

__all__ = [
    'Benchmark',
    'BenchConfiguration',
    'Benchmarker',
    'RateSearch',
    'SearchState',
    'SearchResult',
    'SearchStep',
    'ResultsToCsv'
]
