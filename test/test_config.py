import pytest
from pydantic import ValidationError as PydanticValidationError

from pipeline.common.config import ClassificationPolicy, CleaningPolicy, Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.cleaning == CleaningPolicy(drop_missing_keys=True, default_currency="IDR")
    assert settings.classification.tardy_min_minutes == 10
    assert settings.classification.tardy_max_minutes == 120
    assert settings.classification.undertime_lower_bound_minutes == -180
    assert settings.classification.retain_missing_logout is True
    assert settings.minio.bucket_name == "rawdata"


def test_nested_environment_variables(monkeypatch):
    monkeypatch.setenv("CASES_DATABASE_URL", "sqlite:///env.db")
    monkeypatch.setenv("CASES_CLASSIFICATION__UNDERTIME_LOWER_BOUND_MINUTES", "-120")
    monkeypatch.setenv("CASES_CLEANING__DROP_MISSING_KEYS", "false")

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite:///env.db"
    assert settings.classification.undertime_lower_bound_minutes == -120
    assert settings.cleaning.drop_missing_keys is False


def test_classification_windows_are_validated():
    with pytest.raises(PydanticValidationError):
        ClassificationPolicy(tardy_min_minutes=30, tardy_max_minutes=10)
    with pytest.raises(PydanticValidationError):
        ClassificationPolicy(undertime_lower_bound_minutes=5)
