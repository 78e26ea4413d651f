"""
AccountHub Backend — Registration Route Handlers
==================================================

What:  Account registration and e-mail confirmation.
How:   POST /register dispatches the registration events to a
       RegistrationFormHandler subscribed for this request.

Routes:
    GET  /register/csrf-token        token for REGISTRATION_CSRF_PROTECTION=true setups
    POST /register                   register (400 on invalid / taken username or e-mail)
    GET  /register/confirm/{token}   enable a pending account (404 on unknown token)
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from accounthub.dependencies import (
    REGISTRATION_FORM_NAME,
    get_csrf_token_manager,
    get_registration_form_handler,
    get_user_manager,
)
from accounthub.events import REGISTRATION_INITIALIZE, REGISTRATION_SUCCESS, EventDispatcher, FormEvent
from accounthub.exceptions import FormValidationError
from accounthub.forms import CsrfTokenManager
from accounthub.managers.base import UserManager
from accounthub.schemas.common import ErrorResponse
from accounthub.schemas.user import CsrfTokenResponse, RegistrationResponse, UserRead
from accounthub.services.registration_handler import (
    RegistrationFormHandler,
    confirm_registration,
    project_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/register", tags=["Registration"])


@router.get(
    "/csrf-token",
    response_model=CsrfTokenResponse,
    summary="Issue a CSRF token for the registration form",
)
async def registration_csrf_token(
    csrf_manager: CsrfTokenManager = Depends(get_csrf_token_manager),
) -> CsrfTokenResponse:
    return CsrfTokenResponse(csrf_token=csrf_manager.generate_token(REGISTRATION_FORM_NAME))


@router.post(
    "",
    response_model=RegistrationResponse,
    responses={400: {"description": "Invalid registration", "model": ErrorResponse}},
    summary="Register a new account",
)
async def register(
    payload: Any = Body(default=None),
    handler: RegistrationFormHandler = Depends(get_registration_form_handler),
) -> RegistrationResponse:
    dispatcher = EventDispatcher()
    dispatcher.add_subscriber(handler)

    event = FormEvent(method="POST", payload=payload)
    await dispatcher.dispatch(REGISTRATION_INITIALIZE, event)

    if event.user is None:
        raise FormValidationError(event.form.errors if event.form is not None else [])

    await dispatcher.dispatch(REGISTRATION_SUCCESS, event)
    return event.response


@router.get(
    "/confirm/{token}",
    response_model=UserRead,
    responses={404: {"description": "Unknown or used token", "model": ErrorResponse}},
    summary="Confirm a registration",
)
async def confirm(
    token: str,
    user_manager: UserManager = Depends(get_user_manager),
) -> UserRead:
    user = await confirm_registration(user_manager, token)
    return project_user(user)
