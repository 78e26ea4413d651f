# Importing both models registers them (and the association table) with Base.metadata
from accounthub.models.group import Group, user_groups
from accounthub.models.user import User

__all__ = ["Group", "User", "user_groups"]
