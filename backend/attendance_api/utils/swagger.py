"""Swagger/OpenAPI configuration for the application."""
from flask_swagger_ui import get_swaggerui_blueprint

# Swagger UI configuration
SWAGGER_URL = '/api/v1/docs'
API_URL = '/api/v1/swagger.json'

NETWORK_HEADERS = [
    {"name": "X-WiFi-SSID", "in": "header", "schema": {"type": "string"}},
    {"name": "X-Carrier", "in": "header", "schema": {"type": "string"}},
    {"name": "X-Network-Type", "in": "header", "schema": {"type": "string"}},
    {"name": "X-GPS-Accuracy", "in": "header", "schema": {"type": "string"}},
    {"name": "X-Admin-Override", "in": "header", "schema": {"type": "string"}},
]


def get_swagger_blueprint():
    """Create and return swagger UI blueprint."""
    return get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            'app_name': "Geofence Attendance API",
            'docExpansion': 'list',
            'filter': True,
            'validatorUrl': None,
        }
    )


def _json_body(schema: dict) -> dict:
    return {"required": True, "content": {"application/json": {"schema": schema}}}


def _responses(ok_code: str, ok_description: str, *errors) -> dict:
    responses = {
        ok_code: {
            "description": ok_description,
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Success"}}}
        }
    }
    for code, description in errors:
        responses[code] = {
            "description": description,
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}
        }
    return responses


def _protected(operation: dict) -> dict:
    operation["security"] = [{"bearerAuth": []}]
    operation["parameters"] = NETWORK_HEADERS + operation.get("parameters", [])
    return operation


LOCATION_BODY = {
    "type": "object",
    "required": ["latitude", "longitude"],
    "properties": {
        "latitude": {"type": "number", "minimum": -90, "maximum": 90},
        "longitude": {"type": "number", "minimum": -180, "maximum": 180},
        "address": {"type": "string", "maxLength": 255}
    }
}

GATE_ERRORS = (
    ("400", "Validation error"),
    ("401", "Unauthorized"),
    ("403", "Rejected by network, spoofing or geofence policy"),
    ("503", "Service temporarily unavailable"),
)


def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Geofence Attendance API",
            "description": "Student attendance with GPS geofencing and network checks",
            "version": "1.0.0"
        },
        "servers": [
            {"url": "/api/v1", "description": "Current server"}
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
            },
            "schemas": {
                "User": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "nis": {"type": "string"},
                        "name": {"type": "string"},
                        "kelas": {"type": "string"},
                        "jurusan": {"type": "string"},
                        "email": {"type": "string", "format": "email"},
                        "phone": {"type": "string", "nullable": True},
                        "avatar": {"type": "string", "nullable": True},
                        "is_active": {"type": "boolean"}
                    }
                },
                "AttendanceRecord": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "user_id": {"type": "integer"},
                        "date": {"type": "string", "format": "date"},
                        "check_in": {"type": "string", "format": "date-time", "nullable": True},
                        "check_out": {"type": "string", "format": "date-time", "nullable": True},
                        "status": {"type": "string", "enum": ["present", "late", "absent"]},
                        "location": LOCATION_BODY
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "message": {"type": "string"},
                        "status_code": {"type": "integer"},
                        "errors": {"type": "array", "items": {"type": "string"}}
                    }
                },
                "Success": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean", "default": False},
                        "message": {"type": "string"},
                        "data": {"type": "object"}
                    }
                }
            }
        },
        "paths": {
            "/health": {
                "get": {
                    "tags": ["Health"],
                    "summary": "Service and database health",
                    "responses": _responses("200", "Healthy", ("503", "Database unreachable"))
                }
            },
            "/auth/register": {
                "post": {
                    "tags": ["Authentication"],
                    "summary": "Register a student",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["nis", "name", "kelas", "jurusan", "email", "password"],
                        "properties": {
                            "nis": {"type": "string", "minLength": 3, "maxLength": 20},
                            "name": {"type": "string", "minLength": 2, "maxLength": 100},
                            "kelas": {"type": "string", "minLength": 1, "maxLength": 50},
                            "jurusan": {"type": "string", "minLength": 2, "maxLength": 100},
                            "email": {"type": "string", "format": "email"},
                            "password": {"type": "string", "minLength": 6},
                            "phone": {"type": "string", "minLength": 10, "maxLength": 15}
                        }
                    }),
                    "responses": _responses("201", "User registered",
                                            ("400", "Validation error"),
                                            ("409", "Email already registered"))
                }
            },
            "/auth/login": {
                "post": {
                    "tags": ["Authentication"],
                    "summary": "Login",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["email", "password"],
                        "properties": {
                            "email": {"type": "string", "format": "email"},
                            "password": {"type": "string"}
                        }
                    }),
                    "responses": _responses("200", "Login successful",
                                            ("400", "Validation error"),
                                            ("401", "Invalid credentials"))
                }
            },
            "/user/profile": {
                "get": _protected({
                    "tags": ["User"],
                    "summary": "Current profile",
                    "responses": _responses("200", "Profile", *GATE_ERRORS)
                }),
                "put": _protected({
                    "tags": ["User"],
                    "summary": "Update profile",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["name", "kelas", "jurusan"],
                        "properties": {
                            "name": {"type": "string"},
                            "kelas": {"type": "string"},
                            "jurusan": {"type": "string"},
                            "phone": {"type": "string"},
                            "avatar": {"type": "string", "format": "uri"}
                        }
                    }),
                    "responses": _responses("200", "Profile updated", *GATE_ERRORS)
                })
            },
            "/user/change-password": {
                "post": _protected({
                    "tags": ["User"],
                    "summary": "Change password",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["current_password", "new_password"],
                        "properties": {
                            "current_password": {"type": "string"},
                            "new_password": {"type": "string", "minLength": 6, "maxLength": 50}
                        }
                    }),
                    "responses": _responses("200", "Password changed", *GATE_ERRORS)
                })
            },
            "/user/deactivate": {
                "post": _protected({
                    "tags": ["User"],
                    "summary": "Deactivate account",
                    "responses": _responses("200", "Account deactivated", *GATE_ERRORS)
                })
            },
            "/user/logout": {
                "post": _protected({
                    "tags": ["User"],
                    "summary": "Logout",
                    "responses": _responses("200", "Logged out", *GATE_ERRORS)
                })
            },
            "/user/refresh-token": {
                "post": _protected({
                    "tags": ["User"],
                    "summary": "Issue a fresh access token",
                    "responses": _responses("200", "Token refreshed", *GATE_ERRORS)
                })
            },
            "/attendance/checkin": {
                "post": _protected({
                    "tags": ["Attendance"],
                    "summary": "Check in for today",
                    "requestBody": _json_body(LOCATION_BODY),
                    "responses": _responses("200", "Check in successful",
                                            *GATE_ERRORS, ("409", "Already checked in today"))
                })
            },
            "/attendance/checkout": {
                "post": _protected({
                    "tags": ["Attendance"],
                    "summary": "Check out for today",
                    "requestBody": _json_body(LOCATION_BODY),
                    "responses": _responses("200", "Check out successful",
                                            *GATE_ERRORS,
                                            ("409", "No check in found or already checked out"))
                })
            },
            "/attendance/today": {
                "get": _protected({
                    "tags": ["Attendance"],
                    "summary": "Today's record",
                    "responses": _responses("200", "Record or empty", *GATE_ERRORS)
                })
            },
            "/attendance/history": {
                "get": _protected({
                    "tags": ["Attendance"],
                    "summary": "Paginated history",
                    "parameters": [
                        {"name": "page", "in": "query", "schema": {"type": "integer", "minimum": 1}},
                        {"name": "limit", "in": "query",
                         "schema": {"type": "integer", "minimum": 1, "maximum": 100}}
                    ],
                    "responses": _responses("200", "History", *GATE_ERRORS)
                })
            },
            "/attendance/stats": {
                "get": _protected({
                    "tags": ["Attendance"],
                    "summary": "Attendance statistics",
                    "responses": _responses("200", "Statistics", *GATE_ERRORS)
                })
            },
            "/testing/users": {
                "get": {
                    "tags": ["Testing"],
                    "summary": "List active users",
                    "responses": _responses("200", "Users")
                }
            }
        }
    }
