"""
AccountHub Backend — Dependency Providers
===========================================

What:  FastAPI dependencies that assemble services from their collaborators.
Why:   One place decides which manager / mailer / form factory a request
       gets. Tests replace get_group_manager and get_user_manager through
       app.dependency_overrides to run without a database.

Graph:
    get_db_session ─▶ get_group_manager ─┐
    get_form_factory ────────────────────┴─▶ get_group_service
    get_db_session ─▶ get_user_manager ──┐
    get_form_factory, get_mailer,        ├─▶ get_registration_form_handler
    get_token_generator ─────────────────┘
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from accounthub.config import settings
from accounthub.database import get_db_session
from accounthub.forms import CsrfTokenManager, FormFactory
from accounthub.managers.base import GroupManager, UserManager
from accounthub.managers.group_manager import SqlAlchemyGroupManager
from accounthub.managers.user_manager import SqlAlchemyUserManager
from accounthub.schemas.user import RegistrationForm
from accounthub.services.group_service import GroupService
from accounthub.services.mailer import LoggingMailer, Mailer
from accounthub.services.registration_handler import RegistrationFormHandler
from accounthub.services.token_generator import TokenGenerator

REGISTRATION_FORM_NAME = "registration"

# Stateless collaborators are shared across requests
csrf_token_manager = CsrfTokenManager(settings.secret_key, ttl=settings.csrf_token_ttl)
form_factory = FormFactory(csrf_token_manager)
mailer = LoggingMailer()
token_generator = TokenGenerator()


async def get_group_manager(db: AsyncSession = Depends(get_db_session)) -> GroupManager:
    return SqlAlchemyGroupManager(db)


async def get_user_manager(db: AsyncSession = Depends(get_db_session)) -> UserManager:
    return SqlAlchemyUserManager(db)


def get_form_factory() -> FormFactory:
    return form_factory


def get_csrf_token_manager() -> CsrfTokenManager:
    return csrf_token_manager


def get_mailer() -> Mailer:
    return mailer


def get_token_generator() -> TokenGenerator:
    return token_generator


async def get_group_service(
    group_manager: GroupManager = Depends(get_group_manager),
    forms: FormFactory = Depends(get_form_factory),
) -> GroupService:
    return GroupService(group_manager, forms)


async def get_registration_form_handler(
    user_manager: UserManager = Depends(get_user_manager),
    forms: FormFactory = Depends(get_form_factory),
    account_mailer: Mailer = Depends(get_mailer),
    tokens: TokenGenerator = Depends(get_token_generator),
) -> RegistrationFormHandler:
    form = forms.create_named(
        REGISTRATION_FORM_NAME,
        RegistrationForm,
        csrf_protection=settings.registration_csrf_protection,
    )
    return RegistrationFormHandler(
        form=form,
        user_manager=user_manager,
        mailer=account_mailer,
        token_generator=tokens,
        confirmation_enabled=settings.registration_confirmation_enabled,
    )
