"""Authentication service for student accounts."""
from typing import Dict

from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from attendance_api import db
from attendance_api.models.user import User
from attendance_api.utils.errors import (
    DuplicateEmail, InvalidCredentials, NotFoundOrInactive, PersistenceFailure
)
from attendance_api.utils.helpers import utcnow


class AuthService:
    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(identity=str(user.id))

    @staticmethod
    def register(fields: Dict) -> Dict:
        """Create a student account from validated fields and sign it in."""
        if User.query.filter_by(email=fields['email']).first():
            raise DuplicateEmail()

        user = User(
            email=fields['email'],
            name=fields['name'],
            nis=fields['nis'],
            kelas=fields['kelas'],
            jurusan=fields['jurusan'],
            phone=fields.get('phone')
        )
        user.set_password(fields['password'])

        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateEmail()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Registration failed for {fields["email"]}: {e}')
            raise PersistenceFailure()

        current_app.logger.info(f'Registered user {user.id} ({user.email})')
        return {
            'token': AuthService.issue_token(user),
            'user': user.to_dict()
        }

    @staticmethod
    def login(email: str, password: str) -> Dict:
        """Authenticate an active user and return a token."""
        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user or not user.check_password(password):
            current_app.logger.warning(f'Failed login for {email}')
            raise InvalidCredentials()

        if not user.is_active:
            raise InvalidCredentials("Account is deactivated")

        user.last_login = utcnow()
        db.session.commit()

        return {
            'token': AuthService.issue_token(user),
            'user': user.to_dict()
        }

    @staticmethod
    def get_active_user(user_id: int) -> User:
        """Resolve a token identity to an active user."""
        try:
            user = User.get_by_id(user_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'User lookup failed for {user_id}: {e}')
            raise PersistenceFailure()

        if user is None or not user.is_active:
            raise NotFoundOrInactive()
        return user

    @staticmethod
    def refresh_token(user: User) -> Dict:
        return {'token': AuthService.issue_token(user)}
