"""Profile management for the signed-in student."""
from typing import Dict, List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from attendance_api import db
from attendance_api.models.user import User
from attendance_api.utils.errors import InvalidCredentials, PersistenceFailure
from attendance_api.utils.helpers import utcnow


class UserService:
    @staticmethod
    def _commit(action: str, user: User) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'{action} failed for user {user.id}: {e}')
            raise PersistenceFailure()

    @staticmethod
    def update_profile(user: User, fields: Dict) -> User:
        try:
            return user.update(**fields)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Profile update failed for user {user.id}: {e}')
            raise PersistenceFailure()

    @staticmethod
    def change_password(user: User, current_password: str, new_password: str) -> None:
        if not user.check_password(current_password):
            raise InvalidCredentials("Current password is incorrect", status_code=400)

        user.set_password(new_password)
        user.updated_at = utcnow()
        UserService._commit('Password change', user)
        current_app.logger.info(f'User {user.id} changed password')

    @staticmethod
    def deactivate(user: User) -> None:
        """Soft delete: the account stays but can no longer authenticate."""
        user.is_active = False
        user.updated_at = utcnow()
        UserService._commit('Deactivation', user)
        current_app.logger.info(f'User {user.id} deactivated')

    @staticmethod
    def list_active_users() -> List[User]:
        try:
            return User.query.filter_by(is_active=True).order_by(User.created_at.desc()).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Listing users failed: {e}')
            raise PersistenceFailure()
