from unittest.mock import MagicMock, call

import pytest
from pytest_mock import MockerFixture

from logbench.bench_configuration import BenchConfiguration
from logbench.benchmarker import Benchmarker
from logbench.errors import SpawnFailure, StartFailure, StopFailure


@pytest.fixture
def sleep(mocker: MockerFixture):
    return mocker.patch("logbench.benchmarker.time.sleep")


@pytest.fixture
def parts():
    """Generator, agent and receiver mocks attached to one parent to record call order."""
    parent = MagicMock()
    parent.receiver.read_logs.side_effect = [
        "startup noise plugin:out_flowcounter_simple count:99999\n",
        "plugin:out_flowcounter_simple count:120\nplugin:out_flowcounter_simple count:95\n",
    ]
    return parent


def test_measure_throughput_protocol(parts, sleep):
    bench = Benchmarker(parts.generator, parts.agent, parts.receiver, measure_duration=5)
    parts.attach_mock(sleep, "sleep")

    sample = bench.measure_throughput(10000)

    assert sample == 120
    assert parts.mock_calls == [
        call.receiver.read_logs(),
        call.generator.start(10000),
        call.sleep(5),
        call.generator.stop(),
        call.receiver.read_logs(),
    ]


def test_measure_throughput_without_marker_is_zero(parts, sleep):
    parts.receiver.read_logs.side_effect = ["", "nothing counted\n"]
    bench = Benchmarker(parts.generator, parts.agent, parts.receiver)

    assert bench.measure_throughput(1000) == 0


def test_start_failure_propagates_without_stop(parts, sleep):
    parts.generator.start.side_effect = StartFailure("Failed to start dummer!")
    bench = Benchmarker(parts.generator, parts.agent, parts.receiver)

    with pytest.raises(StartFailure):
        bench.measure_throughput(1000)

    parts.generator.stop.assert_not_called()
    sleep.assert_not_called()


def test_context_manager_stops_forwarders_once(parts):
    with Benchmarker(parts.generator, parts.agent, parts.receiver) as bench:
        pass
    bench.close()

    parts.agent.stop.assert_called_once_with()
    parts.receiver.stop.assert_called_once_with()


def test_forwarders_stopped_on_error(parts, sleep):
    parts.generator.stop.side_effect = StopFailure("Failed to stop dummer!")

    with pytest.raises(StopFailure):
        with Benchmarker(parts.generator, parts.agent, parts.receiver) as bench:
            bench.measure_throughput(1000)

    parts.agent.stop.assert_called_once_with()
    parts.receiver.stop.assert_called_once_with()


def test_receiver_stopped_even_if_agent_stop_fails(parts):
    parts.agent.stop.side_effect = OSError("no such process")
    bench = Benchmarker(parts.generator, parts.agent, parts.receiver)

    with pytest.raises(OSError):
        bench.close()

    parts.receiver.stop.assert_called_once_with()


@pytest.fixture
def config() -> BenchConfiguration:
    config = BenchConfiguration()
    config.agent_config = "agent.conf"
    config.receiver_config = "receiver.conf"
    config.generator_config = "dummer.conf"
    config.command_prefix = []
    config.measure_duration_seconds = 2.0
    config.stop_poll_interval_seconds = 0.5
    config.stop_max_attempts = 0
    return config


def test_from_configuration(mocker: MockerFixture, config):
    fluentd = mocker.patch("logbench.benchmarker.FluentdRunner")
    dummer = mocker.patch("logbench.benchmarker.DummerRunner")

    bench = Benchmarker.from_configuration(config)

    dummer.assert_called_once_with("dummer.conf", command_prefix=[], poll_interval=0.5, max_attempts=0)
    assert fluentd.call_args_list == [
        call("agent.conf", command_prefix=[]),
        call("receiver.conf", command_prefix=[]),
    ]
    assert bench.measure_duration == 2.0


def test_agent_stopped_when_receiver_fails_to_spawn(mocker: MockerFixture, config):
    agent = MagicMock()
    mocker.patch(
        "logbench.benchmarker.FluentdRunner",
        side_effect=[agent, SpawnFailure("Failed to spawn fluentd")],
    )
    mocker.patch("logbench.benchmarker.DummerRunner")

    with pytest.raises(SpawnFailure):
        Benchmarker.from_configuration(config)

    agent.stop.assert_called_once_with()
