"""Conversion of analogue readings into sensor severity codes."""

from hemofsm.sensors.quantize import (
    DEFAULT_BAND_POLICIES,
    SensorChannel,
    SeverityBandPolicy,
    quantize_reading,
    quantize_trace,
)

__all__ = [
    "DEFAULT_BAND_POLICIES",
    "SensorChannel",
    "SeverityBandPolicy",
    "quantize_reading",
    "quantize_trace",
]
