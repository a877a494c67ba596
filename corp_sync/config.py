"""
Configuration management for Corp Name Sync

All settings are read once at startup into a :class:`WorkerConfig` and
passed explicitly to the components that need them.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Secret Manager mount used on Cloud Run / Cloud Functions
SECRET_MOUNT_PATH = '/secrets/GOOGLE_SERVICE_ACCOUNT_JSON'

DEFAULT_LEDGER_SHEET = 'お届け案件管理'
DEFAULT_QUEUE_SHEET = '_Queue'
DEFAULT_ALLOWED_HOSTS = ('tool.readycrew.cloud',)


@dataclass
class WorkerConfig:
    """Settings for one batch invocation.

    Attributes:
        spreadsheet_id:      Key of the Google Sheet holding both tabs.
        service_account_info: Parsed service-account JSON.
        ledger_sheet:        Tab holding the business records.
        queue_sheet:         Tab holding the lookup tasks.
        batch_limit:         Max tasks taken from the queue per run.
        allowed_hosts:       Hosts (and their subdomains) we agree to render.
        include_retry:       Treat ``retry`` rows as eligible, not just ``pending``.
        queue_first_row:     First data row of the queue tab.
        ledger_first_row:    First data row of the ledger tab.
        ledger_id_column:    Column letter holding the record id.
        ledger_name_column:  Column letter holding the business name.
        nav_timeout_ms:      Navigation timeout for the renderer.
        settle_timeout_ms:   How long to wait for a heading to appear.
        body_max_chars:      Body text is cut to this many characters.
        tz_offset_hours:     Fixed UTC offset for queue timestamps.
    """

    spreadsheet_id: str
    service_account_info: Dict[str, Any] = field(repr=False, default_factory=dict)
    ledger_sheet: str = DEFAULT_LEDGER_SHEET
    queue_sheet: str = DEFAULT_QUEUE_SHEET
    batch_limit: int = 10
    allowed_hosts: Tuple[str, ...] = DEFAULT_ALLOWED_HOSTS
    include_retry: bool = False
    queue_first_row: int = 2
    ledger_first_row: int = 2
    ledger_id_column: str = 'F'
    ledger_name_column: str = 'G'
    nav_timeout_ms: int = 30000
    settle_timeout_ms: int = 5000
    body_max_chars: int = 5000
    tz_offset_hours: int = 9

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        secret_path: str = SECRET_MOUNT_PATH,
    ) -> 'WorkerConfig':
        """Build the config from environment variables.

        Raises:
            ConfigurationError: a required value is missing or malformed.
        """
        env = os.environ if environ is None else environ

        spreadsheet_id = (env.get('SPREADSHEET_ID') or '').strip()
        if not spreadsheet_id:
            raise ConfigurationError('SPREADSHEET_ID is not set')

        config = cls(
            spreadsheet_id=spreadsheet_id,
            service_account_info=load_service_account_info(env, secret_path),
            ledger_sheet=env.get('SHEET_MAIN') or DEFAULT_LEDGER_SHEET,
            queue_sheet=env.get('SHEET_QUEUE') or DEFAULT_QUEUE_SHEET,
            batch_limit=_int_setting(env, 'BATCH_LIMIT', 10),
            allowed_hosts=_hosts_setting(env.get('ALLOWED_HOSTS')),
            include_retry=_bool_setting(env.get('INCLUDE_RETRY')),
            queue_first_row=_int_setting(env, 'QUEUE_FIRST_ROW', 2),
            ledger_first_row=_int_setting(env, 'LEDGER_FIRST_ROW', 2),
            ledger_id_column=_column_setting(env, 'LEDGER_ID_COLUMN', 'F'),
            ledger_name_column=_column_setting(env, 'LEDGER_NAME_COLUMN', 'G'),
            nav_timeout_ms=_int_setting(env, 'NAV_TIMEOUT_MS', 30000),
            settle_timeout_ms=_int_setting(env, 'SETTLE_TIMEOUT_MS', 5000),
            body_max_chars=_int_setting(env, 'BODY_MAX_CHARS', 5000),
            tz_offset_hours=_int_setting(env, 'TZ_OFFSET_HOURS', 9, positive=False),
        )
        logger.info(
            "Loaded config: queue=%s ledger=%s limit=%d hosts=%s",
            config.queue_sheet,
            config.ledger_sheet,
            config.batch_limit,
            ','.join(config.allowed_hosts),
        )
        return config


def load_service_account_info(
    env: Mapping[str, str], secret_path: str = SECRET_MOUNT_PATH
) -> Dict[str, Any]:
    """Locate and parse the service-account JSON.

    Looks at ``SA_JSON``, then ``GOOGLE_SERVICE_ACCOUNT_JSON``, then the
    Secret Manager mount.
    """
    raw = env.get('SA_JSON') or env.get('GOOGLE_SERVICE_ACCOUNT_JSON')
    source = 'environment'
    if not raw and Path(secret_path).exists():
        logger.info("Loading credentials from Secret Manager mount...")
        raw = Path(secret_path).read_text(encoding='utf-8')
        source = secret_path
    if not raw:
        raise ConfigurationError(
            'Service account credentials not found (set SA_JSON)'
        )

    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f'Malformed service account JSON in {source}: {e}') from e

    if not isinstance(info, dict):
        raise ConfigurationError('Service account JSON must be an object')
    missing = [k for k in ('client_email', 'private_key') if not info.get(k)]
    if missing:
        raise ConfigurationError(
            f"Service account JSON is missing: {', '.join(missing)}"
        )
    return info


def _int_setting(
    env: Mapping[str, str], name: str, default: int, positive: bool = True
) -> int:
    raw = (env.get(name) or '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f'{name} must be an integer, got {raw!r}') from e
    if positive and value <= 0:
        raise ConfigurationError(f'{name} must be positive, got {value}')
    return value


def _bool_setting(raw: Optional[str]) -> bool:
    return (raw or '').strip().lower() in ('1', 'true', 'yes', 'on')


def _hosts_setting(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_ALLOWED_HOSTS
    hosts = tuple(h.strip().lower() for h in raw.split(',') if h.strip())
    return hosts or DEFAULT_ALLOWED_HOSTS


def _column_setting(env: Mapping[str, str], name: str, default: str) -> str:
    raw = (env.get(name) or default).strip().upper()
    if not raw.isalpha() or not raw.isascii():
        raise ConfigurationError(f'{name} must be a column letter, got {raw!r}')
    return raw
