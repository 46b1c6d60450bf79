"""Range-addressed access to a Google spreadsheet.

The client authenticates lazily: nothing touches the network until the first
read or write. If the credentials or the spreadsheet are rejected the client is
disabled for the rest of the process, and later calls fail fast instead of
retrying. Network failures during the access check leave it retryable.
"""

import asyncio
import enum
import logging
from typing import Any

import httplib2
from fastapi.concurrency import run_in_threadpool
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from careers.errors import KeyFormatError, StorageUnavailableError
from careers.utils.credentials import key_candidates, normalize_private_key

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

_STATUS_CATEGORIES = {
    400: "malformed-credential",
    401: "malformed-credential",
    403: "permission",
    404: "not-found",
}

_CATEGORY_HINTS = {
    "permission": "Share the spreadsheet with the service account email as an Editor.",
    "not-found": "Check that GOOGLE_SHEET_ID is the id from the spreadsheet URL.",
    "malformed-credential": "Check GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY.",
    "missing-credential": "Set GOOGLE_SHEET_ID, GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY.",
    "network": "The Google Sheets API could not be reached; try again later.",
}

# Failures that retrying cannot fix; anything else leaves the client retryable.
FATAL_CATEGORIES = frozenset({"malformed-credential", "missing-credential", "permission", "not-found"})


class ClientState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DISABLED = "disabled"


def column_letter(index: int) -> str:
    """1-based column index to A1 letters (1 -> A, 27 -> AA)."""
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


def classify_http_error(exc: HttpError, action: str) -> StorageUnavailableError:
    status = exc.status_code
    category = _STATUS_CATEGORIES.get(status, "unknown")
    if status is not None and status >= 500:
        category = "network"
    return StorageUnavailableError(
        f"Google Sheets {action} failed with HTTP {status}: {exc.reason}",
        status=status,
        category=category,
        hint=_CATEGORY_HINTS.get(category),
    )


class SheetClient:
    def __init__(
        self,
        spreadsheet_id: str,
        service_account_email: str | None = None,
        private_key: str | None = None,
        service: Any = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self._service_account_email = service_account_email
        self._private_key = private_key
        self._service = service
        self._state = ClientState.UNINITIALIZED
        self._last_error: StorageUnavailableError | None = None
        self._init_lock = asyncio.Lock()

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def last_error(self) -> StorageUnavailableError | None:
        return self._last_error

    def _build_service(self):
        if not self.spreadsheet_id or not self._service_account_email or not self._private_key:
            raise StorageUnavailableError(
                "Google Sheets credentials are incomplete",
                category="missing-credential",
                hint=_CATEGORY_HINTS["missing-credential"],
            )

        normalized = normalize_private_key(self._private_key)
        credentials = None
        last_error: Exception | None = None
        for candidate in key_candidates(self._private_key, normalized):
            try:
                credentials = service_account.Credentials.from_service_account_info(
                    {
                        "client_email": self._service_account_email,
                        "private_key": candidate,
                        "token_uri": TOKEN_URI,
                    },
                    scopes=SCOPES,
                )
                break
            except (ValueError, GoogleAuthError) as exc:
                last_error = exc
                logger.debug("Signer rejected a private key candidate: %s", type(exc).__name__)
        if credentials is None:
            raise KeyFormatError(f"Private key could not be loaded by the signer: {last_error}") from last_error

        return build("sheets", "v4", credentials=credentials, cache_discovery=False)

    async def _execute(self, request, action: str) -> dict:
        try:
            return await run_in_threadpool(request.execute)
        except HttpError as exc:
            raise classify_http_error(exc, action) from exc
        except GoogleAuthError as exc:
            raise StorageUnavailableError(
                f"Google Sheets {action} failed to authenticate: {type(exc).__name__}",
                category="malformed-credential",
                hint=_CATEGORY_HINTS["malformed-credential"],
            ) from exc
        except (OSError, httplib2.HttpLib2Error) as exc:
            raise StorageUnavailableError(
                f"Google Sheets {action} failed: {exc}",
                category="network",
                hint=_CATEGORY_HINTS["network"],
            ) from exc

    async def initialize(self) -> None:
        """Authenticate and verify access once; safe to call repeatedly."""
        if self._state is ClientState.READY:
            return
        async with self._init_lock:
            if self._state is ClientState.READY:
                return
            if self._state is ClientState.DISABLED:
                raise self._disabled_error()

            self._state = ClientState.INITIALIZING
            try:
                if self._service is None:
                    self._service = await run_in_threadpool(self._build_service)
                metadata = await self._execute(
                    self._service.spreadsheets().get(
                        spreadsheetId=self.spreadsheet_id, fields="spreadsheetId,properties.title"
                    ),
                    "access check",
                )
            except KeyFormatError as exc:
                self._disable(StorageUnavailableError(
                    str(exc), category="malformed-credential", hint=exc.hint,
                ))
                raise self._last_error from exc
            except StorageUnavailableError as exc:
                if exc.category in FATAL_CATEGORIES:
                    self._disable(exc)
                else:
                    self._state = ClientState.UNINITIALIZED
                    self._last_error = exc
                    logger.warning("Google Sheets access check failed; will retry on next call: %s", exc)
                raise
            except Exception:
                self._state = ClientState.UNINITIALIZED
                raise

            self._state = ClientState.READY
            self._last_error = None
            title = (metadata or {}).get("properties", {}).get("title", "unknown")
            logger.info("Google Sheets storage ready (spreadsheet title: %s)", title)

    def _disable(self, error: StorageUnavailableError) -> None:
        self._state = ClientState.DISABLED
        self._service = None
        self._last_error = error
        logger.error(
            "Google Sheets storage disabled (%s): %s. %s",
            error.category, error, error.hint or "",
        )

    def _disabled_error(self) -> StorageUnavailableError:
        cause = self._last_error
        return StorageUnavailableError(
            f"Google Sheets storage is disabled: {cause}",
            status=cause.status if cause else None,
            category=cause.category if cause else "unknown",
            hint=cause.hint if cause else None,
        )

    async def _values(self):
        await self.initialize()
        return self._service.spreadsheets().values()

    async def read_range(self, range_: str) -> list[list[str]]:
        values = await self._values()
        result = await self._execute(
            values.get(spreadsheetId=self.spreadsheet_id, range=range_), f"read of {range_}"
        )
        return result.get("values", []) if result else []

    async def append_rows(self, range_: str, rows: list[list]) -> None:
        values = await self._values()
        await self._execute(
            values.append(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": rows},
            ),
            f"append to {range_}",
        )

    async def update_range(self, range_: str, rows: list[list]) -> None:
        values = await self._values()
        await self._execute(
            values.update(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="RAW",
                body={"values": rows},
            ),
            f"update of {range_}",
        )
