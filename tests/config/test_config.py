from __future__ import annotations

from pathlib import Path

import pytest

from casenotes.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_flag,
    get_alerts_api_config,
    get_database_uri,
    get_event_bus_config,
    get_prison_api_config,
    get_service_config,
    get_storage_config,
    require_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.delenv("MISSING_A", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("YES", True), ("1", True), ("off", False), ("0", False)],
)
def test_env_flag_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("FEATURE_FLAG", raw)

    assert env_flag("FEATURE_FLAG") is expected


def test_env_flag_defaults_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FEATURE_FLAG", raising=False)

    assert env_flag("FEATURE_FLAG") is False
    assert env_flag("FEATURE_FLAG", default=True) is True


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEATURE_FLAG", "maybe")

    with pytest.raises(ConfigurationError):
        env_flag("FEATURE_FLAG")


def test_service_config_reads_feature_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ACTION_MISSING_CASE_NOTES", "true")
    monkeypatch.delenv("PUBLISH_PERSON_EVENTS", raising=False)
    monkeypatch.setenv("SERVICE_BASE_URL", "https://case-notes.example")

    config = get_service_config()

    assert config.action_missing_case_notes is True
    assert config.publish_person_events is False
    assert config.base_url == "https://case-notes.example"


def test_alerts_api_config_requires_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ALERTS_API_URL", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_alerts_api_config()


def test_alerts_api_config_is_rate_limited(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALERTS_API_URL", "https://alerts.example")

    resilience = get_alerts_api_config().resilience

    assert resilience.base_url == "https://alerts.example"
    assert resilience.ratelimit is not None
    assert 404 not in resilience.retry.status_forcelist
    assert 503 in resilience.retry.status_forcelist


def test_prison_api_config_caches_switches(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRISON_API_URL", "https://prison-api.example")

    cache = get_prison_api_config().resilience.cache

    assert cache is not None
    assert cache.backend == "sqlite"
    assert cache.default_ttl_seconds == 300.0
    assert cache.should_cache is not None
    assert cache.should_cache([{"prisonId": "MDI"}])
    assert not cache.should_cache({"userMessage": "unavailable"})


def test_event_bus_config_requires_both_endpoints(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENT_TOPIC_URL", "https://topic.example/events")
    monkeypatch.delenv("EVENT_QUEUE_URL", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        get_event_bus_config()

    assert "EVENT_QUEUE_URL" in str(exc.value)


def test_event_bus_config_batches_ten(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENT_TOPIC_URL", "https://topic.example/events")
    monkeypatch.setenv("EVENT_QUEUE_URL", "https://queue.example/messages")

    config = get_event_bus_config()

    assert config.batch_size == 10
    assert config.queue_url == "https://queue.example/messages"


def test_storage_config_uses_data_dir_override(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("CASENOTES_DATA_DIR", str(tmp_path))

    storage = get_storage_config()

    assert storage.database_path() == tmp_path.resolve() / "casenotes.db"
    assert storage.database_uri().startswith("sqlite+pysqlite:///")


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://localhost/casenotes")

    assert get_database_uri() == "postgresql+psycopg://localhost/casenotes"
