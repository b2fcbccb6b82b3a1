import pytest
from study_tracker.config import Settings


def test_defaults(monkeypatch):
    for name in ('ENV', 'MAX_BODY_BYTES', 'PORT', 'ALLOW_DEV_CORS', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    s = Settings()
    assert s.ENV == 'dev'
    assert s.MAX_BODY_BYTES == 50 * 1024 * 1024
    assert s.PORT == 5000
    assert s.ALLOW_DEV_CORS is True
    assert s.LOG_LEVEL == 'INFO'


def test_invalid_values_fail_fast(monkeypatch):
    monkeypatch.setenv('MAX_BODY_BYTES', '0')
    with pytest.raises(RuntimeError, match='MAX_BODY_BYTES'):
        Settings()
    monkeypatch.setenv('MAX_BODY_BYTES', '1024')
    monkeypatch.setenv('PORT', 'eighty')
    with pytest.raises(RuntimeError, match='PORT'):
        Settings()
