# Services package init
"""
AccountHub Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and managers (persistence).
How:   Services receive their collaborators (managers, form factory, mailer)
       through FastAPI dependencies, built fresh for every request.

Service Inventory:
    - GroupService: group listing, lookup, create/update pipeline, delete
    - RegistrationFormHandler: registration events → persisted user
    - Mailer (abstract) / LoggingMailer: account e-mails
    - TokenGenerator: confirmation tokens
"""
