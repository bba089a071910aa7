"""
EcoAudit - Test Configuration

Pytest fixtures and configuration.
"""

from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from ecoaudit.database import Database
from ecoaudit.dependencies import get_database
from ecoaudit.models.audit import Audit
from ecoaudit.schemas.waste import (
    BehavioralTraining,
    BinInventoryItem,
    FacilityWasteInfrastructure,
    OrganicWasteComposting,
    WasteAuditData,
    WastePreventionMeasures,
    WasteStreamAssessment,
    WasteStreamsAssessment,
)
from ecoaudit.services.audit_registry import AuditRegistry
from main import app


@pytest_asyncio.fixture(scope="function")
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """A fresh SQLite database file per test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'audit_test.db'}")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.close()


@pytest_asyncio.fixture(scope="function")
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client bound to the test database."""
    app.dependency_overrides[get_database] = lambda: database

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def make_audit(db_session: AsyncSession) -> Callable[..., Awaitable[Audit]]:
    """Factory creating parent audit rows."""
    registry = AuditRegistry(db_session)

    async def _make(
        centre_name: str = "Riverside Community Centre",
        audit_date: str = "2024-05-01",
        auditor_name: str = "Test Auditor",
    ) -> Audit:
        return await registry.create_audit(centre_name, audit_date, auditor_name)

    return _make


@pytest_asyncio.fixture
async def test_audit(make_audit) -> Audit:
    """Create a test audit."""
    return await make_audit()


@pytest.fixture
def waste_audit_data() -> WasteAuditData:
    """A valid record with five of the six sections filled in."""
    return WasteAuditData(
        facility_infrastructure=FacilityWasteInfrastructure(
            bin_inventory=[
                BinInventoryItem(
                    id="bin-1",
                    location="kitchen",
                    bin_type="general_waste",
                    size_in_litres=240,
                    colour="black_grey",
                    lid_type="flip_lid",
                    signage_present=True,
                    signage_quality=4,
                ),
                BinInventoryItem(
                    id="bin-2",
                    location="main_hall",
                    bin_type="dry_recyclables",
                    size_in_litres=120,
                    colour="green",
                    signage_present=False,
                ),
            ],
            total_bins=2,
            outdoor_bins_present=False,
        ),
        waste_streams_assessment=WasteStreamsAssessment(
            assessments=[
                WasteStreamAssessment(
                    waste_stream="general",
                    estimated_weekly_volume_litres=300,
                    collection_frequency="weekly",
                    collection_days=["monday"],
                    contamination_level=2,
                    annual_cost_euros=1200,
                ),
                WasteStreamAssessment(
                    waste_stream="dry_recyclables",
                    estimated_weekly_volume_litres=200,
                    collection_frequency="fortnightly",
                    contamination_level=4,
                    common_contaminants=["plastic_bags", "food_waste"],
                    annual_cost_euros=400,
                ),
            ],
            total_annual_cost=1600,
            primary_contractor="Green Bins Ltd",
        ),
        organic_waste_composting=OrganicWasteComposting(
            kitchen_present=True,
            food_waste_volume_kg_per_week=15,
            food_waste_disposal_method="general_waste",
            composting_system="none",
        ),
        waste_prevention_measures=WastePreventionMeasures(
            procurement_policy="partial",
            reusable_cups_bottles="full",
            repair_cafe="not_implemented",
        ),
        behavioral_training=BehavioralTraining(
            waste_champion_appointed=True,
            waste_champion_name="Aoife",
            user_education_materials_displayed=False,
            waste_monitoring_records_kept="monthly",
            feedback_mechanism="suggestion_box",
        ),
        completed_sections=5,
        is_quick_mode=False,
    )
