"""Fake-GPS heuristics.

These are best-effort signals, not a security guarantee. Each heuristic is a
separate gate so it can be switched off or tested on its own, and every one
of them passes requests that carry no coordinates.
"""
from decimal import Decimal, InvalidOperation
from typing import Sequence

from attendance_api.security.gates import Gate, GateResult, NetworkContext

FAKE_GPS_MESSAGE = "Access denied: Fake GPS detected"


def plain_decimal(value: float) -> str:
    """Shortest round-trip representation without exponent notation."""
    try:
        return format(Decimal(repr(value)), 'f')
    except InvalidOperation:
        return str(value)


def decimal_places(value: float) -> int:
    text = plain_decimal(value)
    dot = text.find('.')
    if dot == -1:
        return 0
    return len(text) - dot - 1


class CoordinatePrecisionGate(Gate):
    """Real receivers do not report more than a handful of decimals."""

    name = 'coordinate_precision'

    def __init__(self, max_precision: int):
        self.max_precision = max_precision

    def is_suspicious(self, latitude: float, longitude: float) -> bool:
        return (decimal_places(latitude) > self.max_precision or
                decimal_places(longitude) > self.max_precision)

    def evaluate(self, context: NetworkContext) -> GateResult:
        if context.has_location and self.is_suspicious(context.latitude, context.longitude):
            return GateResult.reject(FAKE_GPS_MESSAGE)
        return GateResult.accept()


class RepeatingZeroGate(Gate):
    """A run of zeros combined with excessive precision."""

    name = 'repeating_zero'

    def __init__(self, max_precision: int, zero_run: str = '000'):
        self.max_precision = max_precision
        self.zero_run = zero_run

    def is_suspicious(self, latitude: float, longitude: float) -> bool:
        if self.zero_run not in plain_decimal(latitude) and \
                self.zero_run not in plain_decimal(longitude):
            return False
        return (decimal_places(latitude) > self.max_precision or
                decimal_places(longitude) > self.max_precision)

    def evaluate(self, context: NetworkContext) -> GateResult:
        if context.has_location and self.is_suspicious(context.latitude, context.longitude):
            return GateResult.reject(FAKE_GPS_MESSAGE)
        return GateResult.accept()


class MockLocationHeaderGate(Gate):
    name = 'mock_location_header'

    def __init__(self, headers: Sequence[str]):
        self.headers = tuple(headers)

    def evaluate(self, context: NetworkContext) -> GateResult:
        if context.has_location and any(context.header(h) for h in self.headers):
            return GateResult.reject(FAKE_GPS_MESSAGE)
        return GateResult.accept()


class GPSAccuracyGate(Gate):
    """Sub-meter accuracy, including exactly zero, is rarely genuine."""

    name = 'gps_accuracy'

    def __init__(self, min_accuracy: float = 1.0):
        self.min_accuracy = min_accuracy

    def is_suspicious(self, raw_accuracy: str) -> bool:
        if not raw_accuracy:
            return False
        try:
            accuracy = float(raw_accuracy)
        except ValueError:
            return False
        return accuracy < self.min_accuracy

    def evaluate(self, context: NetworkContext) -> GateResult:
        if context.has_location and self.is_suspicious(context.header('X-GPS-Accuracy')):
            return GateResult.reject(FAKE_GPS_MESSAGE)
        return GateResult.accept()
