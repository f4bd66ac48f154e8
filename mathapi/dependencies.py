"""Global dependencies for the application.

Every shared service is built once in ``create_app`` and parked on
``app.state``; routes reach them through these functions so tests can swap
them with ``app.dependency_overrides``.
"""

from fastapi import Request

from .audit.logger import AuditLogger
from .auth.credentials import CredentialVerifier
from .auth.tokens import TokenService
from .metrics.collector import MetricsCollector


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_credential_verifier(request: Request) -> CredentialVerifier:
    return request.app.state.credential_verifier


def get_audit_logger(request: Request) -> AuditLogger:
    """Dependency to get the shared audit logger.

    Args:
        request: The FastAPI request object.

    Returns:
        The AuditLogger created at startup.
    """
    return request.app.state.audit_logger


def get_metrics(request: Request) -> MetricsCollector:
    return request.app.state.metrics
