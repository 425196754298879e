"""Readings from a CX34 heat pump over Modbus and running statistics about them."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence, TextIO

BLOCK_FIRST = 200
BLOCK_COUNT = 64
INLET_REGISTER = 281
MODE_REGISTER = 141
MS_PER_HOUR = 3_600_000.0
LINE_VOLTAGE = 240
BTU_PER_WATT_HOUR = 3.412


class ModbusError(Exception):
    """A Modbus read did not return the requested registers."""


class ModbusClient(Protocol):
    def read_holding_registers(self, address: int, count: int) -> Sequence[int]:
        """Return ``count`` register values starting at ``address``."""


def _int16(value: float) -> int:
    """Truncate to a signed 16-bit integer."""
    value = int(value) & 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _divide(numerator: float, denominator: float) -> float:
    """Floating-point division that yields inf or nan instead of raising."""
    try:
        return numerator / denominator
    except ZeroDivisionError:
        if numerator == 0 or numerator != numerator:
            return float("nan")
        return float("inf") if numerator > 0 else float("-inf")


def liters_to_gallons(data: int) -> float:
    """Convert a flow register in tenths of litres to gallons."""
    return _int16(data) / 10 * 0.264172


def tenths_celsius_to_fahrenheit(data: int) -> float:
    """Convert a temperature register in tenths of a degree Celsius to Fahrenheit."""
    return _int16(data) / 10 * 1.8 + 32


class HLA:
    """Tracks the high, low and average of a series of values."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._count = 0
        self._sum = 0.0
        self._high = 0.0
        self._low = 0.0

    def add(self, value: float) -> None:
        if self._count:
            self._high = max(self._high, value)
            self._low = min(self._low, value)
        else:
            self._high = self._low = value
        self._sum += value
        self._count += 1

    @property
    def high(self) -> float:
        return self._high

    @property
    def low(self) -> float:
        return self._low

    @property
    def average(self) -> float:
        return self._sum / self._count if self._count else 0.0

    def stat_line(self) -> str:
        return f"{self.high:.1f},{self.low:.1f},{self.average:.1f}"


def _read(client: ModbusClient, address: int, count: int) -> list[int]:
    values = list(client.read_holding_registers(address, count))
    if len(values) < count:
        raise ModbusError(
            f"expected {count} registers at {address}, got {len(values)}"
        )
    return [_int16(v) for v in values[:count]]


@dataclass
class CX34Reading:
    """One snapshot of the heat pump's state."""

    ambient: float = 0.0
    inlet: float = 0.0
    outlet: float = 0.0
    flow: float = 0.0
    setting: int = 0
    current: float = 0.0
    volts: float = 0.0
    BTU: float = 0.0
    Watts: float = 0.0
    COP: float = 0.0
    supplemental: float = 0.0
    setpoint: float = 0.0
    frequency: int = 0
    defrost: int = 0

    @classmethod
    def read(
        cls, client: ModbusClient, label: str, out: TextIO | None = None
    ) -> "CX34Reading":
        """Poll the unit, print a summary line to ``out`` and return the reading."""
        data = _read(client, BLOCK_FIRST, BLOCK_COUNT)
        reading = cls(
            ambient=tenths_celsius_to_fahrenheit(data[2]),
            outlet=tenths_celsius_to_fahrenheit(data[5]),
            flow=liters_to_gallons(data[13]),
            setting=data[48],
            current=data[56] / 10.0,
            volts=float(data[55]),
            supplemental=float(data[62]),
            frequency=data[27],
            defrost=data[16],
        )

        (inlet,) = _read(client, INLET_REGISTER, 1)
        reading.inlet = tenths_celsius_to_fahrenheit(inlet)

        mode, cooling, heating = _read(client, MODE_REGISTER, 3)
        setpoint = cooling if mode == 0 else heating
        reading.setpoint = tenths_celsius_to_fahrenheit(_int16(setpoint * 10))

        reading.BTU = (reading.outlet - reading.inlet) * reading.flow * 500
        reading.Watts = reading.current * LINE_VOLTAGE
        reading.COP = (
            reading.BTU / BTU_PER_WATT_HOUR / reading.Watts if reading.Watts > 0 else 0.0
        )

        stream = sys.stdout if out is None else out
        stream.write("\n" + reading.summary(label))
        return reading

    def summary(self, label: str) -> str:
        return (
            f"{label} Ambient: {self.ambient:.2f} Setpt: {self.setpoint:.2f}"
            f" in: {self.inlet:.2f} F out: {self.outlet:.2f} F Flow: {self.flow:.2f}"
            f" Pump Setting: {self.setting} Current: {self.current:.2f}"
            f" Volts: {self.volts:.2f} BTU: {self.BTU:.2f} Watts: {self.Watts:.2f}"
            f" COP: {self.COP:.2f} Supp: {self.supplemental:.2f}"
            f" Freq: {self.frequency} Def: {self.defrost}"
        )


def _millis() -> int:
    return int(time.monotonic() * 1000)


class CX34Status:
    """Accumulates readings over one run of the heat pump."""

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _millis
        self.reset()

    def reset(self) -> None:
        self.ambient = HLA()
        self.setpoint = HLA()
        self.inlet = HLA()
        self.outlet = HLA()
        self.flow = HLA()
        self.frequency = HLA()
        self.BTU = 0.0
        self.Watts = 0.0
        self.supplemental = 0.0
        self.last_defrost = 0
        self.last_frequency = -1
        self.start_time = self._clock()
        self.last_time = self.start_time

    def log(self, reading: CX34Reading) -> None:
        self.ambient.add(reading.ambient)
        self.setpoint.add(reading.setpoint)
        self.inlet.add(reading.inlet)
        self.outlet.add(reading.outlet)
        self.flow.add(reading.flow)
        self.frequency.add(reading.frequency)

        self.last_frequency = reading.frequency
        self.last_defrost = reading.defrost
        now = self._clock()
        elapsed = now - self.last_time
        if elapsed > 0:
            hours = elapsed / MS_PER_HOUR
            self.BTU += reading.BTU * hours
            self.Watts += reading.Watts * hours
            self.supplemental += reading.supplemental * hours
        self.last_time = now

    def changed(self, reading: CX34Reading) -> bool:
        """True when the compressor started or stopped, or the run passed an hour."""
        if self.last_frequency == -1:
            return False
        was_running = self.last_frequency != 0
        is_running = reading.frequency != 0
        if was_running != is_running:
            return True
        hours = (self._clock() - self.start_time) / MS_PER_HOUR
        return hours > 1.0

    def status_line(self, label: str) -> str:
        elapsed = self._clock() - self.start_time
        total_minutes = elapsed // 60000
        seconds = elapsed // 1000 - total_minutes * 60
        hours, minutes = divmod(total_minutes, 60)

        cop = _divide(_divide(self.BTU, self.Watts), BTU_PER_WATT_HOUR)
        btu_per_hour = _divide(self.BTU, elapsed / MS_PER_HOUR)

        line = (
            f"{label},{hours}:{minutes:02d}:{seconds:02d},"
            f"{self.ambient.stat_line()},{self.setpoint.stat_line()},"
            f"{self.inlet.stat_line()},{self.outlet.stat_line()},"
            f"{self.flow.stat_line()},"
            f"{self.BTU:.1f},{self.Watts:.1f},{self.supplemental:.0f}"
        )
        if self.last_frequency > 0:
            line += f",{cop:.2f},{btu_per_hour:.0f},{self.frequency.average:.1f}"
        return line