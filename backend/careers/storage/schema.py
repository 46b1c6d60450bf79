import asyncio
import logging
from dataclasses import dataclass

from careers.schemas.application import is_question_header
from careers.storage.codec import ANSWER_BASE_HEADERS, APPLICATION_HEADERS, JOB_HEADERS
from careers.storage.sheet_client import SheetClient, column_letter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """A named sheet whose row 1 holds headers and whose data starts at row 2."""

    name: str
    headers: tuple[str, ...]
    growable: bool = False

    @property
    def width(self) -> int:
        return len(self.headers)

    @property
    def header_range(self) -> str:
        return f"{self.name}!1:1"

    @property
    def id_column_range(self) -> str:
        return f"{self.name}!A:A"

    @property
    def data_range(self) -> str:
        return f"{self.name}!A2:{column_letter(self.width)}"

    def row_range(self, row_number: int, width: int | None = None) -> str:
        last = column_letter(width or self.width)
        return f"{self.name}!A{row_number}:{last}{row_number}"


JOBS = Region("Jobs", tuple(JOB_HEADERS))
APPLICATIONS = Region("Applications", tuple(APPLICATION_HEADERS))
ANSWERS = Region("JobSpecificAnswers", tuple(ANSWER_BASE_HEADERS), growable=True)


def question_headers(start: int, stop: int) -> list[str]:
    return [f"Question{i}" for i in range(start, stop + 1)]


class SchemaBootstrapper:
    """Makes sure each region has its header row before data is touched.

    Headers only ever grow. A header row that does not have the expected shape
    is treated as missing and written again in place; existing data rows are
    never moved or removed.
    """

    def __init__(
        self,
        client: SheetClient,
        seed_jobs: list[list[str]] | None = None,
        initial_question_columns: int = 8,
    ):
        self.client = client
        self.seed_jobs = seed_jobs or []
        self.initial_question_columns = initial_question_columns
        self._ready: set[str] = set()
        self._lock = asyncio.Lock()

    async def _read_header(self, region: Region) -> list[str]:
        rows = await self.client.read_range(region.header_range)
        if not rows or not rows[0]:
            return []
        return [str(cell) for cell in rows[0]]

    async def _write_header(self, region: Region, headers: list[str], previous_width: int = 0) -> None:
        # Pad with blanks so leftovers of a longer, broken header are cleared.
        width = max(len(headers), previous_width)
        row = headers + [""] * (width - len(headers))
        await self.client.update_range(region.row_range(1, width), [row])

    def _has_expected_shape(self, region: Region, headers: list[str]) -> bool:
        if region.growable:
            return headers[: region.width] == list(region.headers)
        return headers == list(region.headers)

    async def ensure(self, region: Region) -> None:
        if region.name in self._ready:
            return
        async with self._lock:
            if region.name not in self._ready:
                await self._bootstrap(region)

    async def _bootstrap(self, region: Region) -> None:
        headers = await self._read_header(region)
        if not headers:
            fresh = list(region.headers)
            if region.growable:
                fresh += question_headers(1, self.initial_question_columns)
            logger.info("Initializing %s sheet headers", region.name)
            await self._write_header(region, fresh)
            if region is JOBS and self.seed_jobs:
                await self._seed_jobs()
        elif not self._has_expected_shape(region, headers):
            fresh = list(region.headers)
            if region.growable:
                existing = sum(1 for h in headers if is_question_header(h))
                fresh += question_headers(1, max(existing, self.initial_question_columns))
            logger.warning("%s sheet headers were malformed; rewriting them: %s", region.name, headers)
            await self._write_header(region, fresh, previous_width=len(headers))

        self._ready.add(region.name)

    async def _seed_jobs(self) -> None:
        existing = await self.client.read_range(f"{JOBS.name}!A2:A")
        if any(row and row[0] for row in existing):
            return
        last_row = len(self.seed_jobs) + 1
        await self.client.append_rows(
            f"{JOBS.name}!A2:{column_letter(JOBS.width)}{last_row}", self.seed_jobs
        )
        logger.info("Seeded Jobs sheet with %d sample jobs", len(self.seed_jobs))

    async def ensure_question_columns(self, count: int) -> list[str]:
        """Grow the answers header to hold ``count`` question columns; returns the header row."""
        await self.ensure(ANSWERS)
        headers = await self._read_header(ANSWERS)
        if not self._has_expected_shape(ANSWERS, headers):
            # Someone broke the header after bootstrap; rebuild it before extending.
            self._ready.discard(ANSWERS.name)
            await self.ensure(ANSWERS)
            headers = await self._read_header(ANSWERS)

        existing = sum(1 for h in headers if is_question_header(h))
        if count > existing:
            headers = headers + question_headers(existing + 1, count)
            await self._write_header(ANSWERS, headers)
            logger.info("Added answer columns Question%d..Question%d", existing + 1, count)
        return headers
