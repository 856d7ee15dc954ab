"""Unit test configuration and shared fixtures."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import MagicMock

import pytest

import attachment_migrator.utils.logging as log_module
from attachment_migrator.constants import LOGGER_NAME
from attachment_migrator.services.supabase_adapter import SupabaseAdapter


@pytest.fixture(autouse=True)
def _clean_logger():
    """Detach handlers added by setup_logger so they never outlive a test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    log_module._DEBUG_API_ENABLED = False


def _build_mock_production(
    existing: dict[str, list[dict[str, Any]]] | None = None,
) -> MagicMock:
    """Build a MagicMock that behaves like a production SupabaseAdapter.

    ``existing`` maps object names to the rows ``find_objects`` returns for
    them; any other name returns no rows. ``copy_within_bucket`` succeeds
    unless a test sets a side effect.
    """
    existing = existing or {}
    m = MagicMock(spec=SupabaseAdapter)
    m.list_attachments.return_value = []
    m.find_objects.side_effect = lambda bucket_id, name: existing.get(name, [])
    m.copy_within_bucket.return_value = None
    return m


@pytest.fixture()
def make_mock_production():
    """Factory fixture returning a configured mock production adapter.

    Usage in tests::

        def test_something(make_mock_production):
            production = make_mock_production({"a/b.png": [{"id": "1"}]})
    """
    return _build_mock_production


def make_response(
    status_code: int = 200, json_data: Any = None, text: str = ""
) -> MagicMock:
    """Build a MagicMock resembling a ``requests.Response``."""
    response = MagicMock()
    response.status_code = status_code
    response.url = "https://prod.supabase.co/test"
    response.reason = "Reason"
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response
