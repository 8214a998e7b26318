"""Unit tests for the application factory and lifespan"""

import logging

import pytest

from storefront.config import Settings
from storefront.main import create_app
from storefront.observability.logging_config import CorrelationFilter


@pytest.fixture
def root_logging():
    """Snapshot of the root logger, restored after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _has_correlation_handler(root: logging.Logger) -> bool:
    return any(
        isinstance(f, CorrelationFilter) for handler in root.handlers for f in handler.filters
    )


class TestCreateApp:

    def test_leaves_logging_untouched(self, root_logging):
        before = list(root_logging.handlers)

        create_app(Settings(ALERT_WEBHOOK_URL=None))

        assert root_logging.handlers == before

    def test_production_hides_docs(self):
        application = create_app(Settings(ENVIRONMENT="production"))

        assert application.docs_url is None
        assert application.openapi_url is None

    async def test_lifespan_configures_logging(self, root_logging):
        application = create_app(Settings(LOG_LEVEL="WARNING", LOG_JSON=True))

        async with application.router.lifespan_context(application):
            assert _has_correlation_handler(root_logging)
            assert root_logging.level == logging.WARNING
