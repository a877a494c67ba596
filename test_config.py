"""
Tests for environment-driven configuration
"""

import json

import pytest

from corp_sync.config import WorkerConfig
from corp_sync.errors import ConfigurationError

SA = {'client_email': 'svc@example.iam.gserviceaccount.com', 'private_key': '-----KEY-----'}


def _env(**overrides):
    env = {'SPREADSHEET_ID': 'sheet-123', 'SA_JSON': json.dumps(SA)}
    env.update(overrides)
    return {k: v for k, v in env.items() if v is not None}


def test_defaults(tmp_path):
    config = WorkerConfig.from_env(_env(), secret_path=str(tmp_path / 'none'))
    assert config.spreadsheet_id == 'sheet-123'
    assert config.service_account_info == SA
    assert config.queue_sheet == '_Queue'
    assert config.ledger_sheet == 'お届け案件管理'
    assert config.batch_limit == 10
    assert config.allowed_hosts == ('tool.readycrew.cloud',)
    assert config.include_retry is False
    assert (config.ledger_id_column, config.ledger_name_column) == ('F', 'G')


def test_overrides():
    config = WorkerConfig.from_env(_env(
        SHEET_QUEUE='Q',
        SHEET_MAIN='L',
        BATCH_LIMIT='3',
        ALLOWED_HOSTS='a.example, B.example ,',
        INCLUDE_RETRY='true',
        LEDGER_ID_COLUMN='b',
        LEDGER_NAME_COLUMN='AA',
        QUEUE_FIRST_ROW='3',
    ))
    assert config.queue_sheet == 'Q'
    assert config.ledger_sheet == 'L'
    assert config.batch_limit == 3
    assert config.allowed_hosts == ('a.example', 'b.example')
    assert config.include_retry is True
    assert (config.ledger_id_column, config.ledger_name_column) == ('B', 'AA')
    assert config.queue_first_row == 3


def test_google_service_account_variable_is_accepted():
    config = WorkerConfig.from_env(_env(SA_JSON=None, GOOGLE_SERVICE_ACCOUNT_JSON=json.dumps(SA)))
    assert config.service_account_info == SA


def test_credentials_from_secret_mount(tmp_path):
    secret = tmp_path / 'sa.json'
    secret.write_text(json.dumps(SA), encoding='utf-8')
    config = WorkerConfig.from_env(_env(SA_JSON=None), secret_path=str(secret))
    assert config.service_account_info == SA


def test_missing_spreadsheet_id():
    with pytest.raises(ConfigurationError, match='SPREADSHEET_ID'):
        WorkerConfig.from_env(_env(SPREADSHEET_ID=''))


def test_missing_credentials(tmp_path):
    with pytest.raises(ConfigurationError, match='credentials'):
        WorkerConfig.from_env(_env(SA_JSON=None), secret_path=str(tmp_path / 'none'))


def test_malformed_credentials():
    with pytest.raises(ConfigurationError, match='Malformed'):
        WorkerConfig.from_env(_env(SA_JSON='{not json'))


def test_credentials_missing_fields():
    with pytest.raises(ConfigurationError, match='private_key'):
        WorkerConfig.from_env(_env(SA_JSON=json.dumps({'client_email': 'x'})))


@pytest.mark.parametrize('name,value', [
    ('BATCH_LIMIT', 'ten'),
    ('BATCH_LIMIT', '0'),
    ('LEDGER_ID_COLUMN', 'F1'),
])
def test_bad_values(name, value):
    with pytest.raises(ConfigurationError, match=name):
        WorkerConfig.from_env(_env(**{name: value}))


@pytest.mark.parametrize('raw,expected', [('0', 0), ('-5', -5), ('9', 9)])
def test_tz_offset_may_be_zero_or_negative(raw, expected):
    assert WorkerConfig.from_env(_env(TZ_OFFSET_HOURS=raw)).tz_offset_hours == expected


@pytest.mark.parametrize('name', ['NAV_TIMEOUT_MS', 'QUEUE_FIRST_ROW', 'BODY_MAX_CHARS'])
def test_other_numbers_must_be_positive(name):
    with pytest.raises(ConfigurationError, match=name):
        WorkerConfig.from_env(_env(**{name: '-1'}))


def test_credentials_not_in_repr():
    config = WorkerConfig.from_env(_env())
    assert 'private_key' not in repr(config)
