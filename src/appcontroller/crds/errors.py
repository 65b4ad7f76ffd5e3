"""
Custom exception types for the App controller.
"""
from typing import Optional


class AppControllerException(Exception):
    """Base exception for all app-controller errors."""
    pass


class KubeConfigError(AppControllerException):
    """Raised when the Kubernetes configuration cannot be loaded."""
    pass


class StoreError(AppControllerException):
    """A read or write against the Kubernetes API failed."""

    def __init__(
        self,
        kind: str,
        namespace: Optional[str],
        name: Optional[str],
        status: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.status = status
        self.reason = reason
        target = "/".join(part for part in (namespace, name) if part)
        subject = f"{kind} '{target}'" if target else f"{kind} list"
        detail = f" ({status} {reason})" if status else f" ({reason})" if reason else ""
        super().__init__(f"{subject}{detail}")


class AbsenceError(StoreError):
    """The targeted resource does not exist."""
    pass


class TransientStoreError(StoreError):
    """Any other API failure: network, server side, or a version conflict."""
    pass


class OwnershipLinkError(AppControllerException):
    """A child resource could not be linked to its owning App."""
    pass
