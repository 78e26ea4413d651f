# Forms package init
"""
AccountHub Backend — Forms (binding & validation collaborator)
================================================================

What:  Maps raw submitted payloads onto entities and reports per-field validity.
How:   Pydantic does the validation; Form adds the submit/valid/errors/get_data
       lifecycle and optional CSRF checking on top.
"""

from accounthub.forms.csrf import CsrfTokenManager
from accounthub.forms.factory import CSRF_FIELD, Form, FormFactory, FormType

__all__ = ["CSRF_FIELD", "CsrfTokenManager", "Form", "FormFactory", "FormType"]
