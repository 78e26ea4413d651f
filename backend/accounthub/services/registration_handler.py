"""
AccountHub Backend — Registration Form Handler
================================================

What:  Event subscriber that turns a submitted registration form into a
       persisted user, optionally gated by e-mail confirmation.
Who:   Subscribed to an EventDispatcher by the /register route.

Flow (POST /register):
    registration.initialize → on_registration_initialize()
        1. New empty user from the user manager, set as the form's data
        2. POST only: bind the payload; reject taken usernames / e-mails
        3. Valid → on_success(): enable the user, or disable it, give it a
           confirmation token and mail the link
        4. Persist through the user manager
    registration.success → on_registration_success()
        Builds the response payload for the route

Flow (GET /register/confirm/{token}):
    confirm_registration(): token → user, clear token, enable, persist.
"""

import logging
from typing import Dict

from accounthub.events import REGISTRATION_INITIALIZE, REGISTRATION_SUCCESS, FormEvent
from accounthub.exceptions import NotFoundError
from accounthub.forms import Form
from accounthub.managers.base import UserManager
from accounthub.managers.user_manager import canonicalize
from accounthub.models.user import User
from accounthub.schemas.user import RegistrationResponse, UserRead
from accounthub.services.mailer import Mailer
from accounthub.services.token_generator import TokenGenerator

logger = logging.getLogger(__name__)


def project_user(user: User) -> UserRead:
    return UserRead(
        id=user.id,
        username=user.username,
        email=user.email,
        enabled=bool(user.enabled),
        created_at=user.created_at,
    )


class RegistrationFormHandler:
    """
    Handles the registration form on behalf of the registration events.

    Args:
        form: the (unbound) registration form
        user_manager: creates and persists users
        mailer: sends the confirmation message
        token_generator: produces confirmation tokens
        confirmation_enabled: require e-mail confirmation before enabling
    """

    def __init__(
        self,
        form: Form,
        user_manager: UserManager,
        mailer: Mailer,
        token_generator: TokenGenerator,
        confirmation_enabled: bool = False,
    ):
        self.form = form
        self.user_manager = user_manager
        self.mailer = mailer
        self.token_generator = token_generator
        self.confirmation_enabled = confirmation_enabled

    @staticmethod
    def get_subscribed_events() -> Dict[str, str]:
        return {
            REGISTRATION_INITIALIZE: "on_registration_initialize",
            REGISTRATION_SUCCESS: "on_registration_success",
        }

    async def on_registration_initialize(self, event: FormEvent) -> bool:
        """Returns True when a user was registered."""
        user = self.create_user()
        self.form.set_data(user)
        event.form = self.form

        if event.method.upper() != "POST":
            return False

        self.form.handle_request(event.payload)
        if self.form.is_valid():
            await self._check_available(self.form)

        if not self.form.is_valid():
            logger.info("Registration rejected: %s", self.form.errors)
            return False

        user = self.form.get_data()
        await self.on_success(user, self.confirmation_enabled)
        event.user = user
        return True

    async def on_registration_success(self, event: FormEvent) -> None:
        if event.user is None:
            return
        confirmation_required = not event.user.enabled
        if confirmation_required:
            message = f"An e-mail has been sent to {event.user.email} to confirm the account."
        else:
            message = "The account has been created."
        event.response = RegistrationResponse(
            message=message,
            confirmation_required=confirmation_required,
            user=project_user(event.user),
        )

    async def on_success(self, user: User, confirmation: bool) -> None:
        if confirmation:
            user.enabled = False
            if user.confirmation_token is None:
                user.confirmation_token = self.token_generator.generate_token()
            await self.mailer.send_confirmation_email_message(user)
        else:
            user.enabled = True

        await self.user_manager.update_user(user)
        logger.info(
            "Registered user %s (%s)",
            user.username,
            "awaiting confirmation" if confirmation else "enabled",
        )

    def create_user(self) -> User:
        return self.user_manager.create_user()

    async def _check_available(self, form: Form) -> None:
        submitted = form.submitted
        if await self.user_manager.find_user_by(username_canonical=canonicalize(submitted.username)):
            form.add_error("username", "The username is already used.")
        if await self.user_manager.find_user_by(email_canonical=canonicalize(str(submitted.email))):
            form.add_error("email", "The email is already used.")


async def confirm_registration(user_manager: UserManager, token: str) -> User:
    """
    Enable the account holding `token`.

    Raises:
        NotFoundError: no user has this confirmation token (already used or unknown)
    """
    user = await user_manager.find_user_by_confirmation_token(token)
    if user is None:
        raise NotFoundError(
            resource="user",
            message=f'The user with confirmation token "{token}" does not exist',
        )

    user.confirmation_token = None
    user.enabled = True
    await user_manager.update_user(user)
    logger.info("Confirmed user %s", user.username)
    return user
