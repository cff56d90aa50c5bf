"""
app/db/sheets.py

Purpose: Google Sheets connection setup

- Authenticates with a service account (email/key or JSON file)
- Caches the opened spreadsheet for a short time window
- Creates missing worksheets with their header row
- Health check used by the /health and /ready probes
"""

import time
from typing import Dict, List, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.core.config import settings, Settings
from app.core.exceptions import ConfigurationError, PersistenceError
from app.core.logging import get_logger

logger = get_logger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsClient:
    """
    Low-level Google Sheets client wrapper.

    The opened spreadsheet and its worksheets are reused for
    SHEETS_CACHE_TTL_SECONDS; any failure drops the cache so the next
    call reconnects. All methods are blocking (gspread is synchronous).
    """

    def __init__(self, config: Optional[Settings] = None):
        self._settings = config or settings
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: Dict[str, gspread.Worksheet] = {}
        self._connected_at: Optional[float] = None

    def _credentials(self) -> Credentials:
        if self._settings.GOOGLE_CREDENTIALS_PATH:
            try:
                return Credentials.from_service_account_file(
                    self._settings.GOOGLE_CREDENTIALS_PATH,
                    scopes=SCOPES,
                )
            except FileNotFoundError:
                raise ConfigurationError(
                    f"Google credentials file not found: {self._settings.GOOGLE_CREDENTIALS_PATH}"
                )

        if not (self._settings.GOOGLE_CLIENT_EMAIL and self._settings.GOOGLE_PRIVATE_KEY):
            raise ConfigurationError("Google Sheets credentials are not configured")

        return Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": self._settings.GOOGLE_CLIENT_EMAIL,
                "private_key": self._settings.GOOGLE_PRIVATE_KEY,
                "token_uri": TOKEN_URI,
            },
            scopes=SCOPES,
        )

    def _cache_is_fresh(self) -> bool:
        if self._spreadsheet is None or self._connected_at is None:
            return False
        return (time.monotonic() - self._connected_at) < self._settings.SHEETS_CACHE_TTL_SECONDS

    def invalidate(self) -> None:
        """Forgets the cached spreadsheet handle."""
        self._spreadsheet = None
        self._worksheets = {}
        self._connected_at = None

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(settings.SHEETS_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _open_spreadsheet(self) -> gspread.Spreadsheet:
        if not self._settings.GOOGLE_SHEETS_ID:
            raise ConfigurationError("GOOGLE_SHEETS_ID is not configured")

        logger.info("Connecting to Google Sheets...")
        client = gspread.authorize(self._credentials())
        try:
            spreadsheet = client.open_by_key(self._settings.GOOGLE_SHEETS_ID)
        except gspread.SpreadsheetNotFound:
            raise PersistenceError(
                f"Spreadsheet not found: {self._settings.GOOGLE_SHEETS_ID}"
            )
        logger.info(f"✅ Connected to Google Sheets: {spreadsheet.title}")
        return spreadsheet

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Returns the configured spreadsheet, reconnecting when the cache is stale."""
        if self._cache_is_fresh():
            return self._spreadsheet

        self.invalidate()
        try:
            self._spreadsheet = self._open_spreadsheet()
        except (ConfigurationError, PersistenceError):
            raise
        except Exception as e:
            logger.error(f"Failed to connect to Google Sheets: {e}")
            raise PersistenceError(f"Failed to connect to Google Sheets: {e}") from e

        self._connected_at = time.monotonic()
        return self._spreadsheet

    def worksheet(self, name: str, headers: List[str]) -> gspread.Worksheet:
        """
        Gets a worksheet by title, creating it with `headers` if missing.
        """
        spreadsheet = self.get_spreadsheet()
        if name in self._worksheets:
            return self._worksheets[name]

        try:
            sheet = spreadsheet.worksheet(name)
        except gspread.WorksheetNotFound:
            logger.info(f"📄 Creating worksheet '{name}'", extra={"sheet": name})
            sheet = spreadsheet.add_worksheet(
                title=name,
                rows=1000,
                cols=len(headers),
            )
            sheet.append_row(headers, value_input_option="RAW")

        self._worksheets[name] = sheet
        return sheet

    def worksheet_titles(self) -> List[str]:
        return [ws.title for ws in self.get_spreadsheet().worksheets()]


# Global client
_client: Optional[SheetsClient] = None


def get_sheets_client() -> SheetsClient:
    """
    Returns the process-wide SheetsClient, creating it on first use.
    """
    global _client
    if _client is None:
        _client = SheetsClient()
    return _client


def close_sheets_client() -> None:
    """Drops the cached connection. Called on application shutdown."""
    global _client
    if _client is not None:
        _client.invalidate()
        _client = None
        logger.info("Google Sheets client closed")


def check_sheets_health(client: Optional[SheetsClient] = None) -> bool:
    """
    Checks that the spreadsheet can be opened.

    Returns:
        True if healthy, False otherwise
    """
    try:
        (client or get_sheets_client()).get_spreadsheet()
        return True
    except Exception as e:
        logger.error(f"Google Sheets health check failed: {e}")
        return False
