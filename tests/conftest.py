"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bizcase.calculations.metrics import ScenarioInput


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")


@pytest.fixture
def base_scenario():
    """Three-year business case that pays back inside its horizon."""
    return ScenarioInput(
        initial_investment=100000,
        discount_rate=10,
        project_duration=36,
        yearly_revenue=120000,
        revenue_growth=5,
        operating_costs=40000,
        maintenance_costs=10000,
    )


@pytest.fixture
def short_scenario():
    """Short horizon that stays below the worker offload threshold."""
    return ScenarioInput(
        initial_investment=50000,
        discount_rate=8,
        project_duration=12,
        yearly_revenue=90000,
        revenue_growth=0,
        operating_costs=20000,
        maintenance_costs=5000,
    )
