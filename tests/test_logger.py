"""Telemetry logger tests."""

import numpy as np
import pytest

from centroidal_mpc.utils import DataLogger


class Source:

    def __init__(self):
        self.value = 0.0


def test_log_samples_entries():
    data_logger = DataLogger()
    source = Source()
    data_logger.add_log_entry("value", source, lambda: source.value)
    data_logger.add_log_entry("twice", source, lambda: 2 * source.value)

    for i in range(3):
        source.value = float(i)
        data_logger.log(0.1 * i)

    times, values = data_logger.get("value")
    np.testing.assert_allclose(times, [0.0, 0.1, 0.2])
    np.testing.assert_array_equal(values, [0.0, 1.0, 2.0])
    assert data_logger.latest("twice") == 4.0
    assert data_logger.entry_names() == ["value", "twice"]


def test_duplicate_entry():
    data_logger = DataLogger()
    data_logger.add_log_entry("value", None, lambda: 0.0)
    with pytest.raises(ValueError):
        data_logger.add_log_entry("value", None, lambda: 1.0)


def test_remove_keeps_recorded_samples():
    data_logger = DataLogger()
    first, second = Source(), Source()
    data_logger.add_log_entry("first", first, lambda: first.value)
    data_logger.add_log_entry("second", second, lambda: second.value)
    data_logger.log(0.0)

    data_logger.remove_log_entries(first)
    assert not data_logger.has_entry("first")
    assert data_logger.has_entry("second")
    data_logger.log(0.1)

    assert len(data_logger.get("first")[1]) == 1
    assert len(data_logger.get("second")[1]) == 2
    assert set(data_logger.to_dict()) == {"first", "second"}


def test_re_add_after_remove():
    data_logger = DataLogger()
    source = Source()
    data_logger.add_log_entry("value", source, lambda: source.value)
    data_logger.log(0.0)
    data_logger.remove_log_entries(source)
    data_logger.add_log_entry("value", source, lambda: source.value)
    data_logger.log(0.1)
    assert len(data_logger.get("value")[0]) == 2


def test_unknown_or_empty_entry():
    data_logger = DataLogger()
    with pytest.raises(KeyError):
        data_logger.get("missing")
    data_logger.add_log_entry("value", None, lambda: 0.0)
    with pytest.raises(KeyError):
        data_logger.latest("value")


def test_clear():
    data_logger = DataLogger()
    data_logger.add_log_entry("value", None, lambda: 1.0)
    data_logger.log(0.0)
    data_logger.clear()
    times, values = data_logger.get("value")
    assert len(times) == 0 and len(values) == 0
    assert data_logger.has_entry("value")
