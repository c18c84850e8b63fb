# tests/test_settings.py
import os
from unittest.mock import patch

import pytest

from lambdas.common.settings import AppSettings, get_settings


def test_settings_read_from_environment():
    env = {"SHORTCUT_TOKEN": "abc", "SHORTCUT_INCIDENT_LABEL_ID": "42", "TABLE_NAME": "Events"}
    with patch.dict(os.environ, env):
        settings = get_settings()

    assert settings.shortcut_token == "abc"
    assert settings.shortcut_incident_label_id == 42
    assert settings.table_name == "Events"


@pytest.mark.parametrize("value", ["", "abc", None])
def test_invalid_label_id_becomes_zero(value):
    assert AppSettings(SHORTCUT_INCIDENT_LABEL_ID=value).shortcut_incident_label_id == 0


def test_defaults():
    settings = AppSettings(SHORTCUT_API_URL="https://api.app.shortcut.com/api/v3")
    assert settings.shortcut_api_url == "https://api.app.shortcut.com/api/v3"
    assert AppSettings(MAX_DATE_RANGE=30).max_date_range == 30
