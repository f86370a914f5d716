"""
Shared pytest fixtures for cost report tests.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from fastapi.testclient import TestClient
from costreport.main import app
from costreport.domain.priced_models import PricedCostComponent, PricedResource, PricedProject


FIXED_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed generation time."""
    return lambda: FIXED_TIME


@pytest.fixture
def instance_component():
    """Compute hours cost component."""
    return PricedCostComponent(
        name="Instance usage (Linux/UNIX, on-demand, t3.micro)",
        unit="hours",
        price=Decimal("0.0104"),
        hourly_quantity=Decimal("1"),
        monthly_quantity=Decimal("730"),
        hourly_cost=Decimal("0.0104"),
        monthly_cost=Decimal("7.592"),
    )


@pytest.fixture
def sample_resources():
    """Two priced instances and one unsupported resource, out of name order."""
    return [
        PricedResource(
            name="b",
            resource_type="aws_instance",
            hourly_cost=Decimal("1.00"),
            monthly_cost=Decimal("730.00"),
        ),
        PricedResource(
            name="a",
            resource_type="aws_instance",
            hourly_cost=Decimal("2.00"),
            monthly_cost=Decimal("1460.00"),
        ),
        PricedResource(
            name="c",
            resource_type="unknown_type",
            is_skipped=True,
        ),
    ]


@pytest.fixture
def sample_project(sample_resources):
    """Project without a diff."""
    return PricedProject(
        name="infra/prod",
        metadata={"path": "infra/prod"},
        resources=sample_resources,
    )


@pytest.fixture
def sample_project_payload():
    """Report request payload for the HTTP API."""
    return {
        "run_id": "run-123",
        "projects": [
            {
                "name": "infra/prod",
                "metadata": {"path": "infra/prod"},
                "resources": [
                    {
                        "name": "aws_instance.web",
                        "resource_type": "aws_instance",
                        "hourly_cost": "0.0104",
                        "monthly_cost": "7.592",
                        "cost_components": [
                            {
                                "name": "Instance usage",
                                "unit": "hours",
                                "price": "0.0104",
                                "hourly_quantity": "1",
                                "monthly_quantity": "730",
                                "hourly_cost": "0.0104",
                                "monthly_cost": "7.592",
                            }
                        ],
                    },
                    {
                        "name": "aws_foo.bar",
                        "resource_type": "aws_foo",
                        "is_skipped": True,
                    },
                    {
                        "name": "aws_foo.baz",
                        "resource_type": "aws_foo",
                        "is_skipped": True,
                    },
                ],
            }
        ],
    }
