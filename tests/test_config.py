import logging

from app.core.config import DEFAULT_JWT_SECRET, Settings, warn_insecure_defaults


def test_default_secret_outside_development_warns(caplog):
    settings = Settings(environment="production", jwt_secret=DEFAULT_JWT_SECRET)
    with caplog.at_level(logging.WARNING, logger="app.core.config"):
        assert warn_insecure_defaults(settings) is True
    assert any("JWT_SECRET" in r.getMessage() for r in caplog.records)
    assert all(DEFAULT_JWT_SECRET not in r.getMessage() for r in caplog.records)


def test_development_or_real_secret_is_quiet(caplog):
    with caplog.at_level(logging.WARNING, logger="app.core.config"):
        assert not warn_insecure_defaults(
            Settings(environment="development", jwt_secret=DEFAULT_JWT_SECRET)
        )
        assert not warn_insecure_defaults(
            Settings(environment="production", jwt_secret="a-real-secret")
        )
    assert caplog.records == []
