from django.core.exceptions import PermissionDenied, ValidationError


class Unauthorized(Exception):
    """Raised when a request carries no caller identity (or no organization)."""
    pass


class Forbidden(PermissionDenied):
    """Caller is known but its role or project assignment does not allow the action."""
    pass


class NotFound(Exception):
    """
    Resource is missing or belongs to another organization.
    Both cases surface the same way so tenants can't probe each other.
    """
    def __init__(self, item="Resource"):
        self.item = item
        super().__init__(f"{item} not found")


class InvalidTransition(ValidationError):
    """Raised when an approval decision targets an item that is not pending."""
    pass


class UnknownModule(ValidationError):
    """Raised for a module tag or action that is not in the approval matrix."""
    pass
