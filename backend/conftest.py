"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.core.cache import caches

# Import all fixtures from the shared fixtures module
from core_backend.tests.fixtures import *  # noqa: F401,F403


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear every cache after each test to prevent cache pollution.

    The public menu lives in the "static_data" cache, so both aliases are cleared.
    """
    yield  # Run the test
    for alias in ("default", "static_data"):
        caches[alias].clear()


@pytest.fixture(autouse=True)
def print_agent_key(settings):
    """Known shared secret for print agent requests."""
    settings.PRINT_SERVER_API_KEY = "test-print-agent-key"
    return settings.PRINT_SERVER_API_KEY


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/menu/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def customer_client(api_client, customer_user):
    api_client.force_authenticate(user=customer_user)
    return api_client


@pytest.fixture
def staff_client(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.fixture
def admin_client_api(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def print_agent_client(api_client, print_agent_key):
    api_client.credentials(HTTP_X_API_KEY=print_agent_key)
    return api_client


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "business_logic: mark test as business logic test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as API integration test"
    )
