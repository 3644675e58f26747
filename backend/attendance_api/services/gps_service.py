"""GPS verification service."""
import math
from dataclasses import dataclass
from typing import Dict

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned latitude/longitude rectangle, bounds inclusive."""
    south: float
    north: float
    west: float
    east: float


class GPSService:
    """Service for GPS and location verification."""

    @staticmethod
    def calculate_distance(p1: GeoPoint, p2: GeoPoint) -> float:
        """Calculate great-circle distance between two GPS points in kilometers."""
        lat1_rad = math.radians(p1.latitude)
        lat2_rad = math.radians(p2.latitude)
        delta_lat = math.radians(p2.latitude - p1.latitude)
        delta_lon = math.radians(p2.longitude - p1.longitude)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_KM * c

    @staticmethod
    def distance_in_meters(p1: GeoPoint, p2: GeoPoint) -> float:
        return GPSService.calculate_distance(p1, p2) * 1000

    @staticmethod
    def is_valid_coordinate(lat: float, lng: float) -> bool:
        """Latitude within [-90, 90] and longitude within [-180, 180]."""
        if lat is None or lng is None:
            return False
        try:
            lat, lng = float(lat), float(lng)
        except (TypeError, ValueError, OverflowError):
            return False
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return False
        return -90 <= lat <= 90 and -180 <= lng <= 180

    @staticmethod
    def is_within_school_radius(point: GeoPoint, policy) -> bool:
        """Check whether a point lies within the school's configured radius."""
        distance = GPSService.calculate_distance(point, policy.location)
        return distance <= policy.radius_km

    @staticmethod
    def is_within_country_bounds(point: GeoPoint, bbox: BoundingBox) -> bool:
        """Coarse rectangular containment, no geodesic correction."""
        return (bbox.south <= point.latitude <= bbox.north and
                bbox.west <= point.longitude <= bbox.east)

    @staticmethod
    def verify_location(point: GeoPoint, policy) -> Dict:
        """Verify if a point is within the school boundary."""
        distance = GPSService.calculate_distance(point, policy.location)

        return {
            'is_inside': GPSService.is_within_school_radius(point, policy),
            'distance_km': distance,
            'school_radius_km': policy.radius_km,
            'school_center': {
                'latitude': policy.location.latitude,
                'longitude': policy.location.longitude
            }
        }
