"""Geofence gates for check-in and check-out coordinates."""
from flask import current_app, has_app_context

from attendance_api.policy import SchoolPolicy
from attendance_api.security.gates import Gate, GateResult, NetworkContext
from attendance_api.services.gps_service import BoundingBox, GeoPoint, GPSService
from attendance_api.utils.errors import ValidationError


class CoordinateRangeGate(Gate):
    name = 'coordinate_range'

    def evaluate(self, context: NetworkContext) -> GateResult:
        if not context.has_location or \
                not GPSService.is_valid_coordinate(context.latitude, context.longitude):
            return GateResult.reject("Invalid GPS coordinates", status_code=400, error=ValidationError)
        return GateResult.accept()


class CountryBoundsGate(Gate):
    name = 'country_bounds'

    def __init__(self, bounds: BoundingBox, country_name: str):
        self.bounds = bounds
        self.country_name = country_name

    def evaluate(self, context: NetworkContext) -> GateResult:
        point = GeoPoint(context.latitude, context.longitude)
        if not GPSService.is_within_country_bounds(point, self.bounds):
            return GateResult.reject(f"Location must be within {self.country_name}")
        return GateResult.accept()


class SchoolRadiusGate(Gate):
    name = 'school_radius'

    def __init__(self, policy: SchoolPolicy):
        self.policy = policy

    def evaluate(self, context: NetworkContext) -> GateResult:
        point = GeoPoint(context.latitude, context.longitude)
        verification = GPSService.verify_location(point, self.policy)
        if not verification['is_inside']:
            if has_app_context():
                current_app.logger.info(
                    'Location %.6f,%.6f is %.0f m from school (radius %.0f m)',
                    point.latitude, point.longitude,
                    verification['distance_km'] * 1000, self.policy.radius_km * 1000
                )
            return GateResult.reject("Location is outside school area")
        return GateResult.accept()
