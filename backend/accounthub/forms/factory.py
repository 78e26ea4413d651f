"""
AccountHub Backend — Form Binding
===================================

What:  Binds a submitted payload onto an entity through a Pydantic form type.
Why:   Services stay unaware of how validation works; they only ask
       "is it valid?", "what are the errors?", "give me the bound entity".
How:   FormFactory.create_named() wraps an entity and a FormType subclass.
       Form.handle_request() validates the payload (optionally checking a CSRF
       token first). Nothing touches the entity until get_data() is called,
       so an invalid submission never leaves a half-updated object behind.

Usage:
    form = form_factory.create_named(None, GroupForm, group, csrf_protection=False)
    form.handle_request(payload)
    if form.is_valid():
        group = form.get_data()
    else:
        errors = form.errors
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from accounthub.forms.csrf import CsrfTokenManager

logger = logging.getLogger(__name__)

CSRF_FIELD = "_token"

T = TypeVar("T")


class FormType(BaseModel):
    """
    Base class for form schemas.

    Unknown fields are a schema mismatch, not something to ignore.
    Subclasses override bind_to() when fields do not map 1:1 onto attributes.
    """

    model_config = ConfigDict(extra="forbid")

    def bind_to(self, entity: Any) -> Any:
        """Copy every validated field onto the entity."""
        for field_name, value in self.model_dump().items():
            setattr(entity, field_name, value)
        return entity


def _format_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        errors.append({"field": location or "form", "message": error.get("msg", "Invalid value")})
    return errors


class Form(Generic[T]):
    """A single binding of one payload onto one entity."""

    def __init__(
        self,
        name: Optional[str],
        form_type: Type[FormType],
        data: T,
        csrf_protection: bool,
        csrf_manager: Optional[CsrfTokenManager] = None,
    ):
        self.name = name
        self.form_type = form_type
        self._data = data
        self.csrf_protection = csrf_protection
        self._csrf_manager = csrf_manager
        self._submitted = False
        self._bound = False
        self.submitted: Optional[FormType] = None
        self.errors: List[Dict[str, str]] = []

    @property
    def intention(self) -> str:
        """CSRF intention: the form name, or the form type for unnamed forms."""
        return self.name or self.form_type.__name__

    def handle_request(self, payload: Any) -> None:
        """
        Validate `payload`; errors are collected, never raised.

        A missing body counts as an empty object. Any other non-object body
        (list, string, number) is a form-level error.
        """
        self._submitted = True
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            self.add_error("form", "The submitted data must be a JSON object.")
            return
        values = dict(payload)

        if self.csrf_protection:
            token = values.pop(CSRF_FIELD, None)
            if self._csrf_manager is None or not self._csrf_manager.is_token_valid(self.intention, token):
                logger.info("Rejected submission of form '%s': invalid CSRF token", self.intention)
                self.add_error(CSRF_FIELD, "The CSRF token is invalid. Please try to resubmit the form.")
                return

        try:
            self.submitted = self.form_type.model_validate(values)
        except PydanticValidationError as e:
            self.errors.extend(_format_errors(e))

    def add_error(self, field: str, message: str) -> None:
        self.errors.append({"field": field, "message": message})

    def is_submitted(self) -> bool:
        return self._submitted

    def is_valid(self) -> bool:
        return self._submitted and self.submitted is not None and not self.errors

    def get_data(self) -> T:
        """
        Return the bound entity.

        The submitted values are applied on the first call, and only when
        the form is valid.
        """
        if self.is_valid() and not self._bound:
            self.submitted.bind_to(self._data)
            self._bound = True
        return self._data

    def set_data(self, data: T) -> None:
        self._data = data
        self._bound = False


class FormFactory:
    """Creates forms sharing one CSRF token manager."""

    def __init__(self, csrf_manager: Optional[CsrfTokenManager] = None):
        self.csrf_manager = csrf_manager

    def create_named(
        self,
        name: Optional[str],
        form_type: Type[FormType],
        data: Any = None,
        csrf_protection: bool = True,
    ) -> Form:
        return Form(
            name=name,
            form_type=form_type,
            data=data,
            csrf_protection=csrf_protection,
            csrf_manager=self.csrf_manager,
        )
