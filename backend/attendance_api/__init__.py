"""Geofence Attendance API - Application Factory."""
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

API_PREFIX = '/api/v1'


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Policies and gate pipelines are built once and shared read-only
    setup_policies(app)

    # Import models so their tables are registered on the metadata
    from attendance_api import models  # noqa: F401

    # Request hooks
    register_request_hooks(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Add CLI commands
    register_commands(app)

    return app


def setup_policies(app: Flask) -> None:
    from attendance_api.policy import load_policies
    from attendance_api.security.pipeline import build_location_pipeline, build_network_pipeline
    from attendance_api.services.attendance_classifier import AttendanceClassifier

    policies = load_policies(app.config)
    app.extensions['attendance_api'] = {
        'policies': policies,
        'classifier': AttendanceClassifier(policies.school),
        'network_pipeline': build_network_pipeline(policies),
        'location_pipeline': build_location_pipeline(policies),
    }

    if not policies.network.admin_override_key:
        app.logger.info('Admin override disabled: no ADMIN_OVERRIDE_KEY configured')


def register_request_hooks(app: Flask) -> None:
    from attendance_api.security.middleware import apply_response_headers, init_request_state

    app.before_request(init_request_state)
    app.after_request(apply_response_headers)


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendance_api.api.auth import auth_bp
    from attendance_api.api.users import users_bp
    from attendance_api.api.attendance import attendance_bp
    from attendance_api.api.testing import testing_bp
    from attendance_api.utils.helpers import error_response, success_response
    from attendance_api.utils.swagger import API_URL, SWAGGER_URL, generate_swagger_spec, get_swagger_blueprint

    app.register_blueprint(auth_bp, url_prefix=f'{API_PREFIX}/auth')
    app.register_blueprint(users_bp, url_prefix=f'{API_PREFIX}/user')
    app.register_blueprint(attendance_bp, url_prefix=f'{API_PREFIX}/attendance')
    app.register_blueprint(testing_bp, url_prefix=f'{API_PREFIX}/testing')

    @app.route(f'{API_PREFIX}/health')
    def health_check():
        from sqlalchemy import text
        from sqlalchemy.exc import SQLAlchemyError

        try:
            db.session.execute(text('SELECT 1'))
            database_status = 'connected'
        except SQLAlchemyError as e:
            db.session.rollback()
            app.logger.error(f'Health check database failure: {e}')
            database_status = 'disconnected'

        if database_status != 'connected':
            return error_response('Service unhealthy - database disconnected', 503)

        return success_response(
            data={
                'service': 'geofence-attendance-api',
                'version': '1.0.0',
                'status': 'healthy',
                'database': {'status': database_status}
            },
            message='Service is healthy'
        )

    # Swagger UI
    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    app.register_blueprint(get_swagger_blueprint(), url_prefix=SWAGGER_URL)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from sqlalchemy.exc import SQLAlchemyError
    from werkzeug.exceptions import HTTPException

    from attendance_api.utils.errors import AttendanceAPIError, PersistenceFailure
    from attendance_api.utils.helpers import handle_error

    @app.errorhandler(AttendanceAPIError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        app.logger.error(f'Database error: {error}')
        failure = PersistenceFailure()
        return jsonify(failure.to_dict()), failure.status_code

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('Geofence Attendance API startup')


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command()
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command()
    @click.option('--email', prompt=True)
    @click.option('--name', prompt=True)
    @click.option('--nis', prompt=True)
    @click.option('--kelas', prompt=True)
    @click.option('--jurusan', prompt=True)
    @click.password_option()
    def create_student(email, name, nis, kelas, jurusan, password):
        """Create a student account."""
        from attendance_api.services.auth_service import AuthService
        from attendance_api.utils.errors import AttendanceAPIError, ValidationError
        from attendance_api.utils.validators import validate_register_payload

        try:
            fields = validate_register_payload({
                'email': email, 'name': name, 'nis': nis,
                'kelas': kelas, 'jurusan': jurusan, 'password': password
            })
            result = AuthService.register(fields)
        except ValidationError as e:
            raise click.ClickException(f'{e.message}: {", ".join(e.errors)}')
        except AttendanceAPIError as e:
            raise click.ClickException(e.message)

        click.echo(f'Student created: {result["user"]["email"]}')

    @app.cli.command()
    def show_policy():
        """Print the active school policy and gate pipelines."""
        from attendance_api.utils.helpers import utcnow

        state = app.extensions['attendance_api']
        school = state['policies'].school
        classifier = state['classifier']

        today = classifier.to_local(utcnow()).date()
        start, end = classifier.school_hours(today)
        school_day = 'school day' if classifier.is_school_day(today) else 'no school'

        click.echo(f'School: ({school.latitude}, {school.longitude}) radius {school.radius_km} km')
        click.echo(
            f'Today {today.isoformat()} ({school_day}): '
            f'{start:%H:%M}-{end:%H:%M} {school.timezone}, '
            f'late threshold {school.late_threshold_minutes} min'
        )
        click.echo(f'Network gates: {", ".join(state["network_pipeline"].gate_names())}')
        click.echo(f'Location gates: {", ".join(state["location_pipeline"].gate_names())}')
        override = 'enabled' if state['policies'].network.admin_override_key else 'disabled'
        click.echo(f'Admin override: {override}')
