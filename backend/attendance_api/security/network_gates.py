"""Network gate: which networks a request may come from."""
import ipaddress
import secrets
from typing import Optional, Pattern, Sequence

from attendance_api.security.gates import Gate, GateResult, NetworkContext


def resolve_client_ip(headers, remote_addr: Optional[str]) -> str:
    """Resolve the client IP with proxy headers taking precedence.

    Order: first X-Forwarded-For segment, X-Real-IP, CF-Connecting-IP,
    then the socket address.
    """
    forwarded_for = headers.get('X-Forwarded-For', '')
    if forwarded_for:
        first = forwarded_for.split(',')[0].strip()
        if first:
            return first

    real_ip = headers.get('X-Real-IP', '')
    if real_ip:
        return real_ip.strip()

    cf_ip = headers.get('CF-Connecting-IP', '')
    if cf_ip:
        return cf_ip.strip()

    return remote_addr or ''


class PathExemptionGate(Gate):
    """Health and auth endpoints skip the network gate."""

    name = 'path_exemption'

    def __init__(self, exempt_paths: Sequence[str]):
        self.exempt_paths = frozenset(exempt_paths)

    def evaluate(self, context: NetworkContext) -> GateResult:
        if context.path in self.exempt_paths:
            return GateResult.bypass()
        return GateResult.accept()


class AdminOverrideGate(Gate):
    """Shared-secret bypass of every remaining gate."""

    name = 'admin_override'

    def __init__(self, override_key: Optional[str]):
        self.override_key = override_key

    def is_override(self, context: NetworkContext) -> bool:
        if not self.override_key:
            return False
        if context.admin_override:
            return True
        if not context.admin_key:
            return False
        return secrets.compare_digest(context.admin_key.encode(), self.override_key.encode())

    def evaluate(self, context: NetworkContext) -> GateResult:
        if self.is_override(context):
            return GateResult.bypass(tag='admin-bypassed')
        return GateResult.accept()


class IPAllowListGate(Gate):
    name = 'ip_allow_list'

    def __init__(self, networks: Sequence, addresses: Sequence):
        self.networks = tuple(networks)
        self.addresses = frozenset(addresses)

    def is_allowed(self, ip: str) -> bool:
        try:
            address = ipaddress.ip_address(ip.strip())
        except ValueError:
            return False

        if address in self.addresses:
            return True
        return any(address.version == network.version and address in network
                   for network in self.networks)

    def evaluate(self, context: NetworkContext) -> GateResult:
        if not self.is_allowed(context.client_ip):
            return GateResult.reject("Access denied: Invalid IP range")
        return GateResult.accept()


class VPNDetectionGate(Gate):
    """Heuristic VPN/proxy detection."""

    name = 'vpn_detection'

    def __init__(self, vpn_headers: Sequence[str], keywords: Sequence[str], min_ttl: int):
        self.vpn_headers = tuple(vpn_headers)
        self.keywords = tuple(k.lower() for k in keywords)
        self.min_ttl = min_ttl

    def is_vpn(self, context: NetworkContext) -> bool:
        if any(context.header(header) for header in self.vpn_headers):
            return True

        user_agent = context.user_agent.lower()
        if any(keyword in user_agent for keyword in self.keywords):
            return True

        ttl = context.header('X-TTL')
        if ttl:
            try:
                # Low hop counts suggest tunnelled traffic
                if int(ttl) < self.min_ttl:
                    return True
            except ValueError:
                pass

        return False

    def evaluate(self, context: NetworkContext) -> GateResult:
        if self.is_vpn(context):
            return GateResult.reject("Access denied: VPN usage detected")
        return GateResult.accept()


class NetworkTypeGate(Gate):
    name = 'network_type'

    def __init__(self, allowed_types: Sequence[str]):
        self.allowed_types = frozenset(t.lower() for t in allowed_types)

    def evaluate(self, context: NetworkContext) -> GateResult:
        if context.network_type.lower() not in self.allowed_types:
            return GateResult.reject("Access denied: Invalid network type")
        return GateResult.accept()


class WiFiSSIDGate(Gate):
    """School WiFi by exact name or institution prefix."""

    name = 'wifi_ssid'

    def __init__(self, allowed_ssids: Sequence[str], patterns: Sequence[Pattern]):
        self.allowed_ssids = frozenset(s.lower() for s in allowed_ssids)
        self.patterns = tuple(patterns)

    def is_allowed(self, ssid: str) -> bool:
        if ssid.lower() in self.allowed_ssids:
            return True
        upper = ssid.upper()
        return any(pattern.match(upper) for pattern in self.patterns)

    def evaluate(self, context: NetworkContext) -> GateResult:
        if not self.is_allowed(context.wifi_ssid):
            return GateResult.reject("Access denied: Invalid WiFi network")
        return GateResult.accept()


class CellularCarrierGate(Gate):
    """National carrier on a secure cellular generation."""

    name = 'cellular_carrier'

    def __init__(self, carriers: Sequence[str], secure_types: Sequence[str]):
        self.carriers = tuple(c.lower() for c in carriers)
        self.secure_types = frozenset(t.lower() for t in secure_types)

    def is_allowed(self, carrier: str, network_type: str) -> bool:
        carrier = carrier.lower()
        if not any(allowed in carrier for allowed in self.carriers):
            return False
        return network_type.lower() in self.secure_types

    def evaluate(self, context: NetworkContext) -> GateResult:
        if not self.is_allowed(context.carrier, context.network_type):
            return GateResult.reject("Access denied: Insecure cellular network")
        return GateResult.accept()
