"""Quantize analogue sensor readings into tri-state severity codes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from math import isfinite
from types import MappingProxyType
from typing import Mapping

import numpy as np
import numpy.typing as npt

from hemofsm.domain.models import SeverityCode


CodeArray = npt.NDArray[np.int8]


class SensorChannel(StrEnum):
    """Analogue channels that feed the severity codes of a sensor snapshot."""

    FLOW = "flow"
    TEMPERATURE = "temperature"
    PRESSURE = "pressure"
    CONDUCTIVITY = "conductivity"

    @property
    def code_field(self) -> str:
        """Name of the matching `SensorSnapshot` code field."""
        return {
            SensorChannel.FLOW: "flow_code",
            SensorChannel.TEMPERATURE: "temp_code",
            SensorChannel.PRESSURE: "press_code",
            SensorChannel.CONDUCTIVITY: "cond_code",
        }[self]


@dataclass(frozen=True, slots=True)
class SeverityBandPolicy:
    """Warning and critical bands for one analogue channel.

    A reading at or beyond a warning bound is WARNING, at or beyond a
    critical bound is CRITICAL. Unset bounds never trigger.
    """

    channel: SensorChannel
    unit: str
    warn_low: float | None = None
    crit_low: float | None = None
    warn_high: float | None = None
    crit_high: float | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "channel", SensorChannel(self.channel))
        except ValueError:
            valid = ", ".join(channel.value for channel in SensorChannel)
            raise ValueError(f"channel must be one of: {valid}; got {self.channel!r}") from None

        bounds =[self.crit_low, self.warn_low, self.warn_high, self.crit_high]
        filtered = [value for value in bounds if value is not None]
        if not all(isfinite(value) for value in filtered):
            raise ValueError(f"{self.channel.value}: band bounds must be finite")
        if filtered != sorted(filtered):
            raise ValueError(
                f"{self.channel.value}: bounds must satisfy crit_low <= warn_low <= warn_high <= crit_high"
            )
        if self.warn_low is not None and self.warn_high is not None and self.warn_low >= self.warn_high:
            raise ValueError(f"{self.channel.value}: warn_low must be < warn_high")


def quantize_trace(values: npt.ArrayLike, policy: SeverityBandPolicy) -> CodeArray:
    """Quantize a 1D trace of readings into severity codes.

    Non-finite readings are treated as CRITICAL.
    """
    x = np.asarray(values, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError("values must be 1D")

    codes = np.full(x.shape, SeverityCode.NORMAL, dtype=np.int8)
    finite = np.isfinite(x)
    safe = np.where(finite, x, 0.0)

    warning = np.zeros(x.shape, dtype=np.bool_)
    critical = ~finite
    if policy.warn_low is not None:
        warning |= finite & (safe <= policy.warn_low)
    if policy.warn_high is not None:
        warning |= finite & (safe >= policy.warn_high)
    if policy.crit_low is not None:
        critical |= finite & (safe <= policy.crit_low)
    if policy.crit_high is not None:
        critical |= finite & (safe >= policy.crit_high)

    codes[warning] = SeverityCode.WARNING
    codes[critical] = SeverityCode.CRITICAL
    return codes


def quantize_reading(value: float, policy: SeverityBandPolicy) -> SeverityCode:
    """Quantize one reading into a severity code."""
    return SeverityCode(int(quantize_trace([value], policy)[0]))


DEFAULT_BAND_POLICIES: Mapping[SensorChannel, SeverityBandPolicy] = MappingProxyType(
    {
        SensorChannel.FLOW: SeverityBandPolicy(
            channel=SensorChannel.FLOW,
            unit="mL/min",
            crit_low=100.0,
            warn_low=200.0,
            warn_high=450.0,
            crit_high=550.0,
        ),
        SensorChannel.TEMPERATURE: SeverityBandPolicy(
            channel=SensorChannel.TEMPERATURE,
            unit="C",
            crit_low=33.0,
            warn_low=35.0,
            warn_high=37.5,
            crit_high=39.0,
        ),
        SensorChannel.PRESSURE: SeverityBandPolicy(
            channel=SensorChannel.PRESSURE,
            unit="mmHg",
            crit_low=0.0,
            warn_low=20.0,
            warn_high=200.0,
            crit_high=250.0,
        ),
        SensorChannel.CONDUCTIVITY: SeverityBandPolicy(
            channel=SensorChannel.CONDUCTIVITY,
            unit="mS/cm",
            crit_low=12.0,
            warn_low=13.0,
            warn_high=15.0,
            crit_high=16.0,
        ),
    }
)
