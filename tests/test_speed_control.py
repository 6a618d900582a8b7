"""
Tests for the speed multiplier channel.
"""

import threading

import pytest

from sailsim.simulation.speed_control import SpeedControl


class TestSpeedControl:
    """Tests for SpeedControl."""

    def test_default_speed(self):
        assert SpeedControl().speed == 1.0

    @pytest.mark.parametrize("speed", [None, "2", float('nan'), float('inf'), True])
    def test_invalid_initial_speed(self, speed):
        with pytest.raises(ValueError):
            SpeedControl(speed)

    @pytest.mark.parametrize("value", [2, 0.5, 0, -1, 100])
    def test_accepts_numbers(self, value):
        control = SpeedControl()
        assert control.handle_command({'setSpeed': value})
        assert control.speed == value

    @pytest.mark.parametrize("command", [
        {'setSpeed': 'fast'},
        {'setSpeed': None},
        {'setSpeed': float('nan')},
        {'setSpeed': False},
        {'speed': 3},
        {},
        "setSpeed",
        None,
        [('setSpeed', 3)],
    ])
    def test_ignores_invalid_commands(self, command):
        control = SpeedControl(2.0)
        assert not control.handle_command(command)
        assert control.speed == 2.0

    def test_last_valid_speed_wins(self):
        control = SpeedControl()
        for command in ({'setSpeed': 3}, {'setSpeed': 'x'}, {'setSpeed': 5}, {}):
            control.handle_command(command)
        assert control.speed == 5

    def test_concurrent_writers(self):
        control = SpeedControl()
        threads = [
            threading.Thread(target=control.set_speed, args=(value,))
            for value in range(1, 21)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert control.speed in range(1, 21)
