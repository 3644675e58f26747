"""Gate primitives: request context, gate result and the gate interface."""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional, Type

from attendance_api.utils.errors import AttendanceAPIError, GateRejection


@dataclass(frozen=True)
class NetworkContext:
    """Everything a gate may inspect about one request.

    Header values are client-declared; they are trusted only as far as the
    gates validate them.
    """
    path: str = ''
    client_ip: str = ''
    user_agent: str = ''
    network_type: str = ''
    wifi_ssid: str = ''
    carrier: str = ''
    admin_key: str = ''
    admin_override: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self):
        normalized = {str(k).lower(): str(v) for k, v in dict(self.headers).items()}
        object.__setattr__(self, 'headers', normalized)

    def header(self, name: str) -> str:
        return self.headers.get(name.lower(), '')

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def with_location(self, latitude: float, longitude: float) -> 'NetworkContext':
        return replace(self, latitude=latitude, longitude=longitude)


class Verdict(Enum):
    ACCEPT = 'accept'
    REJECT = 'reject'
    BYPASS = 'bypass'


@dataclass(frozen=True)
class GateResult:
    """Outcome of a single gate or of a whole pipeline."""
    verdict: Verdict
    reason: str = ''
    gate: str = ''
    status_code: int = 403
    error: Type[AttendanceAPIError] = GateRejection
    tag: Optional[str] = None

    @classmethod
    def accept(cls) -> 'GateResult':
        return cls(Verdict.ACCEPT)

    @classmethod
    def reject(cls, reason: str, status_code: int = 403,
               error: Type[AttendanceAPIError] = GateRejection) -> 'GateResult':
        return cls(Verdict.REJECT, reason=reason, status_code=status_code, error=error)

    @classmethod
    def bypass(cls, tag: Optional[str] = None) -> 'GateResult':
        return cls(Verdict.BYPASS, tag=tag)

    @property
    def accepted(self) -> bool:
        return self.verdict is not Verdict.REJECT

    def to_exception(self) -> AttendanceAPIError:
        if issubclass(self.error, GateRejection):
            return self.error(self.reason, status_code=self.status_code, gate=self.gate)
        return self.error(self.reason)


class Gate:
    """A single pass/fail policy check."""

    name = 'gate'

    def evaluate(self, context: NetworkContext) -> GateResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}>'
