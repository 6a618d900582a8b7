"""
Tests for the simulation models: clock, environment, boat, player,
telemetry and the track recorder.
"""

from unittest.mock import Mock

import pytest

from sailsim.contest import Contest
from sailsim.control.commands import ControlCommand, ControllerState
from sailsim.control.guidance import GuidanceController, GuidanceMode
from sailsim.control.telemetry import RecordingTelemetry
from sailsim.exceptions import ConfigurationError
from sailsim.geometry import Position
from sailsim.run_simulation import SimulationConfig, build_scheduler
from sailsim.simulation.boat import KNOTS_TO_MS, Boat, BoatConfig
from sailsim.simulation.clock import SimulationClock
from sailsim.simulation.environment import (
    Environment,
    EnvironmentConfig,
    EnvironmentSnapshot,
    Wind,
)
from sailsim.simulation.metrics import TrackRecorder
from sailsim.simulation.player import Player
from sailsim.simulation.scheduler import TimeStepScheduler


def snapshot(heading=90.0, speed=10.0):
    return EnvironmentSnapshot(wind=Wind(heading=heading, speed=speed), time=0.0)


class TestClock:
    """Tests for SimulationClock."""

    def test_advance(self):
        clock = SimulationClock(delta=100, now=5000)
        assert clock.advance() == 5100
        assert clock.advance() == 5200
        assert clock.delta_sec == 0.1

    @pytest.mark.parametrize("delta", [0, -10])
    def test_rejects_non_positive_step(self, delta):
        with pytest.raises(ValueError):
            SimulationClock(delta=delta)


class TestEnvironment:
    """Tests for the wind model."""

    def test_defaults(self):
        env = Environment()
        assert env.heading == 0.0
        assert env.speed == 10.0

    def test_nested_wind_request(self):
        env = Environment({"wind": {"heading": 370, "speed": "12"}, "unknown": 1})
        assert env.heading == 10.0
        assert env.speed == 12.0

    def test_flat_request(self):
        config = EnvironmentConfig.from_request({"wind_heading": 45.0, "seed": 3})
        assert config.wind_heading == 45.0
        assert config.seed == 3

    def test_steady_by_default(self):
        env = Environment({"wind": {"heading": 270, "speed": 8}})
        clock = SimulationClock(delta=100)

        for _ in range(100):
            snap = env.update(clock)
            clock.advance()

        assert snap.wind == Wind(heading=270.0, speed=8.0)

    def test_snapshot_time_is_clock_time(self):
        clock = SimulationClock(delta=100, now=12345.0)
        assert Environment().update(clock).time == 12345.0

    def test_seeded_shifts_reproducible(self):
        options = EnvironmentConfig(shift_rate=10.0, gust_probability=0.1, seed=42)
        a, b = Environment(options), Environment(options)
        clock = SimulationClock(delta=1000)

        headings_a = [a.update(clock).wind.heading for _ in range(200)]
        headings_b = [b.update(clock).wind.heading for _ in range(200)]

        assert headings_a == headings_b
        assert len(set(headings_a)) > 1
        assert all(0.0 <= h < 360.0 for h in headings_a)

    def test_gusts_raise_then_expire(self):
        # Gusts of exactly x1.5 lasting 0.5-1.5 s, restarting as soon as one ends
        env = Environment(EnvironmentConfig(
            wind_speed=10.0, gust_probability=100.0,
            gust_intensity_min=1.5, gust_intensity_max=1.5, gust_duration=1.0,
            seed=7,
        ))
        clock = SimulationClock(delta=100)

        speeds = [round(env.update(clock).wind.speed, 6) for _ in range(20)]

        assert speeds[0] == 15.0
        assert set(speeds) == {10.0, 15.0}

    @pytest.mark.parametrize("options", [
        {"wind": {"heading": "north"}},
        {"wind": {"speed": None}},
        {"wind_heading": [90]},
    ])
    def test_bad_wind_values(self, options):
        with pytest.raises(ConfigurationError, match="environment"):
            Environment(options)


class TestBoat:
    """Tests for the kinematic boat."""

    def test_positive_rudder_turns_to_port(self):
        boat = Boat(heading=90.0)
        boat.apply_command(ControlCommand(servo_rudder=1.0))
        boat.simulate(SimulationClock(delta=1000), snapshot())

        assert boat.state.attitude.heading == pytest.approx(70.0)

    def test_rudder_clamped(self):
        boat = Boat()
        boat.apply_command(ControlCommand(servo_rudder=3.0))
        assert boat.state.rudder == 1.0
        boat.apply_command(ControlCommand(servo_rudder=-7.0))
        assert boat.state.rudder == -1.0

    def test_beam_reach_speed(self):
        # Wind blowing east, boat heading north
        boat = Boat(heading=0.0)
        boat.simulate(SimulationClock(delta=1000), snapshot(heading=90.0, speed=10.0))

        assert boat.state.speed == pytest.approx(5.0)
        assert boat.state.distance_sailed == pytest.approx(5.0 * KNOTS_TO_MS)
        assert boat.state.gps.lat > 0.0
        assert boat.state.gps.lon == pytest.approx(0.0, abs=1e-12)

    def test_no_go_zone_drifts(self):
        # Wind blowing south, boat heading straight upwind
        config = BoatConfig(drift_speed=0.3)
        boat = Boat(heading=0.0, config=config)
        boat.simulate(SimulationClock(delta=1000), snapshot(heading=180.0))

        assert boat.state.speed == pytest.approx(0.3)

    def test_close_hauled_slower_than_reach(self):
        boat = Boat()
        close_hauled = boat._boat_speed(40.0, 180.0, 10.0)
        reach = boat._boat_speed(90.0, 180.0, 10.0)
        assert 0.2 < close_hauled < reach

    def test_reset(self):
        boat = Boat()
        boat.apply_command(ControlCommand(servo_rudder=0.5))
        boat.simulate(SimulationClock(delta=1000), snapshot())

        boat.reset(Position(1.0, 2.0), heading=-90.0)

        assert boat.state.gps == Position(1.0, 2.0)
        assert boat.state.attitude.heading == 270.0
        assert boat.state.rudder == 0.0
        assert boat.state.distance_sailed == 0.0


class TestPlayer:
    """Tests for Player."""

    @pytest.fixture
    def controller(self):
        controller = Mock()
        controller.name = "mock"
        controller.ai.return_value = ControlCommand(servo_rudder=2.0)
        return controller

    def test_name_defaults_to_controller(self, controller):
        assert Player(Boat(), controller).name == "mock"
        assert Player(Boat(), controller, name="blue").name == "blue"

    def test_run_ai_applies_command(self, controller):
        player = Player(Boat(), controller)
        env = snapshot()

        command = player.run_ai(100, env, True)

        state = controller.ai.call_args[0][0]
        assert isinstance(state, ControllerState)
        assert state.boat is player.boat.state
        assert state.environment is env
        assert state.delta == 100
        assert state.is_simulation
        assert player.last_command is command
        assert player.boat.state.rudder == 1.0

    def test_restart(self, controller, north_contest):
        player = Player(Boat(Position(5.0, 5.0)), controller)
        player.faults = 3

        player.restart(north_contest)

        assert player.boat.state.gps == north_contest.start
        assert player.faults == 0
        assert player.request == north_contest.request
        controller.init.assert_called_once_with(north_contest)

    def test_restart_with_request(self, controller, north_contest):
        player = Player(Boat(), controller, contest=north_contest)
        request = {"wind": {"heading": 0.0}}

        player.restart(north_contest, request)

        assert player.request is request
        assert controller.init.call_count == 2

    def test_close(self, controller):
        Player(Boat(), controller).close()
        controller.close.assert_called_once()


class TestTelemetry:
    """Tests for the recording telemetry channel."""

    def test_bounded(self):
        telemetry = RecordingTelemetry(max_records=3)
        for i in range(5):
            telemetry.status(i)

        assert list(telemetry.records) == [2, 3, 4]
        assert not telemetry.closed


class TestTrackRecorder:
    """Tests for TrackRecorder."""

    @pytest.fixture
    def scheduler(self, north_contest):
        scheduler = TimeStepScheduler(100, False, north_contest.request)
        scheduler.add_player(Player(Boat(), GuidanceController.nominal(),
                                    name="blue", contest=north_contest))
        return scheduler

    def test_samples_every_nth_step(self, scheduler):
        recorder = TrackRecorder(sample_every=10)
        scheduler.run(recorder, max_steps=100)

        assert len(recorder.tracks["blue"]) == 10

    def test_summary(self, scheduler):
        recorder = TrackRecorder()
        scheduler.run(recorder, max_steps=100)

        summary = recorder.summarize("blue")
        assert summary.samples == 100
        assert summary.duration_sec == pytest.approx(9.9, abs=1e-3)
        assert summary.mean_speed == pytest.approx(5.0)
        assert summary.distance_m == pytest.approx(100 * 0.1 * 5.0 * KNOTS_TO_MS)
        assert summary.max_abs_rudder == pytest.approx(0.0, abs=1e-9)
        assert summary.waypoints_reached == 0
        assert summary.faults == 0

    def test_forwards_to_on_step(self, scheduler):
        on_step = Mock()
        scheduler.run(TrackRecorder(on_step=on_step), max_steps=3)

        assert on_step.call_count == 3
        players, env = on_step.call_args[0]
        assert players == scheduler.get_players()
        assert isinstance(env, EnvironmentSnapshot)

    def test_finished_course_counts_every_mark(self, scheduler):
        recorder = TrackRecorder(sample_every=50)
        scheduler.run(recorder, max_steps=10000)

        controller = scheduler.get_players()[0].controller
        assert controller.waypoints.finished
        assert recorder.tracks["blue"][-1].finished
        assert recorder.summarize("blue").waypoints_reached == 2

    def test_unknown_player(self):
        assert TrackRecorder().summarize("nobody") is None

    def test_compute_summary(self, scheduler):
        recorder = TrackRecorder()
        scheduler.run(recorder, max_steps=5)

        summary = recorder.compute_summary()
        assert list(summary) == ["blue"]
        assert summary["blue"]["samples"] == 5


class TestBuildScheduler:
    """Tests for the CLI's scheduler construction."""

    def test_players_and_options(self, north_contest):
        config = SimulationConfig(realtime=False, players=2, mode=GuidanceMode.NOMINAL)
        scheduler = build_scheduler(north_contest, config)

        players = scheduler.get_players()
        assert [p.name for p in players] == ["Jon.Melin-1", "Jon.Melin-2"]
        assert all(p.controller.config.mode == GuidanceMode.NOMINAL for p in players)
        assert all(p.controller.waypoints is not None for p in players)
        assert scheduler.environment.heading == 90.0
        assert not scheduler.realtime

    def test_bad_wind_is_configuration_error(self, north_waypoints):
        contest = Contest(waypoints=north_waypoints,
                          request={"wind": {"heading": "north", "speed": 10}})

        with pytest.raises(ConfigurationError):
            build_scheduler(contest, SimulationConfig(realtime=False))

    def test_batch_run(self, north_contest):
        scheduler = build_scheduler(north_contest, SimulationConfig(realtime=False))
        scheduler.run(max_steps=20)

        assert scheduler.steps == 20
        assert not scheduler.is_running
