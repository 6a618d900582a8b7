"""
Control Modules
===============

Navigation controllers and the contract the simulation drives them through.

Components:
    - ControlCommand / ControllerState / Controller: controller contract
    - GuidanceController: line-of-sight waypoint guidance with tacking
    - TelemetryChannel: outbound status channel injected into controllers
"""

from .commands import ControlCommand, ControllerState, Controller
from .guidance import GuidanceController, GuidanceConfig, GuidanceState, GuidanceMode
from .telemetry import TelemetryChannel, NullTelemetry, RecordingTelemetry

__all__ = [
    'ControlCommand',
    'ControllerState',
    'Controller',
    'GuidanceController',
    'GuidanceConfig',
    'GuidanceState',
    'GuidanceMode',
    'TelemetryChannel',
    'NullTelemetry',
    'RecordingTelemetry',
]
