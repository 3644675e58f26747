"""Immutable school, network and spoof-detection policies.

Built once from the Flask config in ``create_app`` and shared read-only by
every request afterwards.
"""
import ipaddress
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Pattern, Tuple, Union
from zoneinfo import ZoneInfo

from attendance_api.services.gps_service import BoundingBox, GeoPoint

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class SchoolPolicy:
    """School location and schedule."""
    latitude: float
    longitude: float
    radius_km: float
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    late_threshold_minutes: int
    timezone: str = 'Asia/Jakarta'

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class NetworkPolicy:
    """Allow-lists and toggles for the network gate."""
    exempt_paths: Tuple[str, ...]
    admin_override_key: Optional[str]
    ip_networks: Tuple[IPNetwork, ...]
    ip_addresses: Tuple[IPAddress, ...]
    enable_vpn_detection: bool
    vpn_headers: Tuple[str, ...]
    vpn_user_agent_keywords: Tuple[str, ...]
    vpn_min_ttl: int
    enable_network_type_check: bool
    allowed_network_types: Tuple[str, ...]
    allowed_ssids: Tuple[str, ...]
    ssid_patterns: Tuple[Pattern, ...]
    allowed_carriers: Tuple[str, ...]
    secure_cellular_types: Tuple[str, ...]


@dataclass(frozen=True)
class SpoofPolicy:
    """Fake-GPS heuristics and their switches."""
    max_coordinate_precision: int
    enable_precision_check: bool
    enable_repeating_zero_check: bool
    enable_mock_header_check: bool
    enable_gps_accuracy_check: bool
    mock_location_headers: Tuple[str, ...]
    min_gps_accuracy: float


@dataclass(frozen=True)
class LocationPolicy:
    """Country pre-filter applied before the school radius."""
    country_name: str
    country_bounds: BoundingBox


@dataclass(frozen=True)
class Policies:
    school: SchoolPolicy
    network: NetworkPolicy
    spoof: SpoofPolicy
    location: LocationPolicy


def parse_ip_allow_list(entries) -> Tuple[Tuple[IPNetwork, ...], Tuple[IPAddress, ...]]:
    """Split allow-list entries into CIDR networks and exact addresses."""
    networks = []
    addresses = []
    for entry in entries:
        if '/' in entry:
            networks.append(ipaddress.ip_network(entry, strict=False))
        else:
            addresses.append(ipaddress.ip_address(entry))
    return tuple(networks), tuple(addresses)


def load_school_policy(config: Mapping) -> SchoolPolicy:
    return SchoolPolicy(
        latitude=config['SCHOOL_LATITUDE'],
        longitude=config['SCHOOL_LONGITUDE'],
        radius_km=config['SCHOOL_RADIUS_KM'],
        start_hour=config['SCHOOL_START_HOUR'],
        start_minute=config['SCHOOL_START_MINUTE'],
        end_hour=config['SCHOOL_END_HOUR'],
        end_minute=config['SCHOOL_END_MINUTE'],
        late_threshold_minutes=config['LATE_THRESHOLD_MINUTES'],
        timezone=config['SCHOOL_TIMEZONE']
    )


def load_network_policy(config: Mapping) -> NetworkPolicy:
    networks, addresses = parse_ip_allow_list(config['ALLOWED_IP_RANGES'])
    return NetworkPolicy(
        exempt_paths=tuple(config['NETWORK_GATE_EXEMPT_PATHS']),
        admin_override_key=config.get('ADMIN_OVERRIDE_KEY') or None,
        ip_networks=networks,
        ip_addresses=addresses,
        enable_vpn_detection=bool(config['ENABLE_VPN_DETECTION']),
        vpn_headers=tuple(config['VPN_HEADERS']),
        vpn_user_agent_keywords=tuple(k.lower() for k in config['VPN_USER_AGENT_KEYWORDS']),
        vpn_min_ttl=config['VPN_MIN_TTL'],
        enable_network_type_check=bool(config['ENABLE_NETWORK_TYPE_CHECK']),
        allowed_network_types=tuple(t.lower() for t in config['ALLOWED_NETWORK_TYPES']),
        allowed_ssids=tuple(config['ALLOWED_WIFI_SSIDS']),
        ssid_patterns=tuple(re.compile(p) for p in config['WIFI_SSID_PATTERNS']),
        allowed_carriers=tuple(c.lower() for c in config['ALLOWED_CARRIERS']),
        secure_cellular_types=tuple(t.lower() for t in config['SECURE_CELLULAR_TYPES'])
    )


def load_spoof_policy(config: Mapping) -> SpoofPolicy:
    return SpoofPolicy(
        max_coordinate_precision=config['SPOOF_MAX_COORDINATE_PRECISION'],
        enable_precision_check=bool(config['ENABLE_PRECISION_CHECK']),
        enable_repeating_zero_check=bool(config['ENABLE_REPEATING_ZERO_CHECK']),
        enable_mock_header_check=bool(config['ENABLE_MOCK_HEADER_CHECK']),
        enable_gps_accuracy_check=bool(config['ENABLE_GPS_ACCURACY_CHECK']),
        mock_location_headers=tuple(config['MOCK_LOCATION_HEADERS']),
        min_gps_accuracy=config['MIN_GPS_ACCURACY_METERS']
    )


def load_location_policy(config: Mapping) -> LocationPolicy:
    south, north, west, east = config['COUNTRY_BOUNDS']
    return LocationPolicy(
        country_name=config['COUNTRY_NAME'],
        country_bounds=BoundingBox(south=south, north=north, west=west, east=east)
    )


def load_policies(config: Mapping) -> Policies:
    """Freeze the policy-related config values into immutable structures."""
    return Policies(
        school=load_school_policy(config),
        network=load_network_policy(config),
        spoof=load_spoof_policy(config),
        location=load_location_policy(config)
    )
