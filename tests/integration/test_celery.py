"""Integration tests for the Celery configuration."""

import pytest

pytestmark = pytest.mark.integration


class TestCeleryConfig:
    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "orders"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "orders"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_outbox_task_registered(self):
        from config.celery import app

        app.loader.import_default_modules()
        assert "core.publish_outbox_events" in app.tasks


class TestDebugTask:
    def test_debug_task_runs_eagerly(self):
        from modules.core.tasks import debug_task

        result = debug_task.delay()

        assert result.successful()
        assert result.result == {"status": "ok", "message": "Celery is working"}

    def test_outbox_relay_with_nothing_pending(self):
        from modules.core.tasks import publish_outbox_events

        assert publish_outbox_events() == {"published": 0, "failed": 0}
