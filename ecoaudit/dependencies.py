"""
EcoAudit - FastAPI Dependencies

Shared dependencies providing database sessions and the services built on
them. The ``Database`` is created in the application lifespan and kept on
``app.state``; nothing here holds a module-level engine.
"""

from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ecoaudit.database import Database
from ecoaudit.services.audit_registry import AuditRegistry
from ecoaudit.services.waste_audit_store import WasteAuditStore


def get_database(request: Request) -> Database:
    """The Database opened for this application."""
    return request.app.state.database


async def get_db(database: Database = Depends(get_database)) -> AsyncIterator[AsyncSession]:
    """
    Dependency for getting async database session.
    Use with FastAPI's Depends().
    """
    async with database.session() as session:
        yield session


def get_waste_audit_store(db: AsyncSession = Depends(get_db)) -> WasteAuditStore:
    return WasteAuditStore(db)


def get_audit_registry(db: AsyncSession = Depends(get_db)) -> AuditRegistry:
    return AuditRegistry(db)
