# Overview: Per-application service registry (explicitly constructed, injected into routes).

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from .audit_service import AuditService
from .auth_service import AuthService
from .catalog_service import CatalogService
from .roll_service import RollService
from .user_service import UserService

EXTENSION_KEY = "fabricstore.services"


@dataclass
class ServiceRegistry:
    audit: AuditService
    auth: AuthService
    rolls: RollService
    catalogs: CatalogService
    users: UserService

    @classmethod
    def build(cls, session, *, session_ttl_hours: int = 24) -> "ServiceRegistry":
        """Wire one instance of each service around a shared session handle."""
        audit = AuditService(session)
        return cls(
            audit=audit,
            auth=AuthService(session, audit, ttl_hours=session_ttl_hours),
            rolls=RollService(session, audit),
            catalogs=CatalogService(session, audit),
            users=UserService(session, audit),
        )


def get_services() -> ServiceRegistry:
    return current_app.extensions[EXTENSION_KEY]
