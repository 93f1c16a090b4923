import asyncio
import logging
from datetime import datetime, timezone

from app.exceptions.custom import FetchExhaustedError, PageParseError, SupabaseError
from app.jobs import JobStore
from app.parsers.page import parse_page
from app.schemas.casino import NoDepositBonus, ParsedCasino
from app.schemas.jobs import LogStatus
from app.schemas.responses import ParseResult
from app.services.html_fetcher import HtmlFetcher
from app.services.supabase import SupabaseService

logger = logging.getLogger(__name__)

CASINOS_TABLE = "casinos"
FEATURES_TABLE = "casino_features"
BONUSES_TABLE = "bonuses"
SCREENSHOTS_TABLE = "screenshots"
LANGUAGES_TABLE = "languages"
CASINO_LANGUAGES_TABLE = "casino_languages"

MAX_ATTEMPTS = 2  # first try + exactly one retry


def _prefix(job_id: int | None) -> str:
    return f"[Job {job_id}] " if job_id is not None else ""


def casino_row(parsed: ParsedCasino) -> dict:
    """Scalar columns written on both insert and update."""
    limits = parsed.withdrawal_limits_structured
    return {
        "logo_url": parsed.logo_url,
        "rating": parsed.rating,
        "description": parsed.description_html or parsed.description,
        "owner": parsed.owner,
        "operator": parsed.operator,
        "established": parsed.established,
        "estimated_revenue": parsed.estimated_revenue,
        "withdrawal_limits": parsed.withdrawal_limits,
        "withdrawal_limit_per_day": limits.per_day,
        "withdrawal_limit_per_week": limits.per_week,
        "withdrawal_limit_per_month": limits.per_month,
        "data_casino_id": parsed.data_casino_id,
    }


def bonus_row(casino_id: int, bonus_type: str, bonus: NoDepositBonus) -> dict:
    row = bonus.model_dump()
    row["name"] = bonus.name or "Unknown Bonus"
    row["casino_id"] = casino_id
    row["type"] = bonus_type
    return row


class CasinoParserService:
    def __init__(
        self,
        db: SupabaseService,
        fetcher: HtmlFetcher,
        jobs: JobStore,
        courtesy_delay: float = 30.0,
    ):
        self._db = db
        self._fetcher = fetcher
        self._jobs = jobs
        self._courtesy_delay = courtesy_delay

    async def parse_and_save(self, url: str, job_id: int | None = None) -> ParseResult:
        """Fetch, parse and persist one casino page.

        A failed attempt is logged, followed by a courtesy delay; the first
        failure is retried once, the second is returned as a failure.
        """
        prefix = _prefix(job_id)
        error = ""

        for attempt in range(1, MAX_ATTEMPTS + 1):
            logger.info(
                "%sProcessing URL: %s%s", prefix, url,
                f" (retry attempt {attempt - 1})" if attempt > 1 else "",
            )
            try:
                return await self._parse_and_save_once(url, job_id)
            except (FetchExhaustedError, PageParseError) as exc:
                error = exc.message
                logger.error("%sFailed to parse casino data for %s: %s", prefix, url, error)
                log_message = f"Failed to parse casino data: {error}"
            except Exception as exc:
                error = str(exc) or exc.__class__.__name__
                logger.exception("%sError processing %s", prefix, url)
                log_message = f"Error: {error}"

            await self._jobs.add_log(url, LogStatus.error, log_message, job_id=job_id)

            if attempt < MAX_ATTEMPTS:
                logger.info("%sWill retry %s in %.0f seconds", prefix, url, self._courtesy_delay)
            else:
                logger.info(
                    "%sFailed after retry, waiting %.0f seconds before continuing",
                    prefix, self._courtesy_delay,
                )
            await asyncio.sleep(self._courtesy_delay)

        return ParseResult(success=False, error=error)

    async def _parse_and_save_once(self, url: str, job_id: int | None) -> ParseResult:
        html = await self._fetcher.fetch_html(url)
        parsed = parse_page(html, url)
        casino_id = await self.save_casino(parsed, job_id)
        await self.save_related_data(casino_id, parsed, job_id)
        await self._jobs.add_log(
            url,
            LogStatus.success,
            f"Successfully parsed casino data for {parsed.name}",
            job_id=job_id,
            casino_id=casino_id,
        )
        return ParseResult(success=True, casino_id=casino_id, parsed_data=parsed)

    async def parse_and_save_html(self, html: str, url: str) -> ParseResult:
        """Parse pasted HTML and persist it; the pending log row is updated in place."""
        log = await self._jobs.add_log(url, LogStatus.pending, "Parsing HTML content")
        try:
            parsed = parse_page(html, url)
            casino_id = await self.save_casino(parsed)
            await self.save_related_data(casino_id, parsed)
        except (PageParseError, SupabaseError) as exc:
            logger.error("Error parsing pasted HTML for %s: %s", url, exc.message)
            await self._jobs.update_log(log.id, LogStatus.error, exc.message)
            return ParseResult(success=False, error=exc.message)
        except Exception as exc:
            error = str(exc) or exc.__class__.__name__
            logger.exception("Error saving pasted HTML for %s", url)
            await self._jobs.update_log(log.id, LogStatus.error, f"Error: {error}")
            return ParseResult(success=False, error=error)

        await self._jobs.update_log(
            log.id, LogStatus.success, f"Successfully parsed casino data for {parsed.name}"
        )
        return ParseResult(success=True, casino_id=casino_id, parsed_data=parsed)

    async def save_casino(self, parsed: ParsedCasino, job_id: int | None = None) -> int:
        """Update the casino matching `parsed.name` (case-insensitive) or insert it."""
        prefix = _prefix(job_id)
        existing = await self._db.select_one(CASINOS_TABLE, "id", ilike={"name": parsed.name})

        if existing:
            casino_id = existing["id"]
            logger.info("%sUpdating existing casino: %s (ID: %s)", prefix, parsed.name, casino_id)
            await self._db.update(
                CASINOS_TABLE,
                {**casino_row(parsed), "updated_at": datetime.now(timezone.utc).isoformat()},
                eq={"id": casino_id},
            )
            return casino_id

        rows = await self._db.insert(CASINOS_TABLE, {"name": parsed.name, **casino_row(parsed)})
        casino_id = rows[0]["id"]
        logger.info("%sInserted casino %s with ID: %s", prefix, parsed.name, casino_id)
        return casino_id

    async def save_related_data(
        self, casino_id: int, parsed: ParsedCasino, job_id: int | None = None
    ) -> None:
        """Persist child collections. Individual write failures are logged and skipped."""
        prefix = _prefix(job_id)

        await self._replace_rows(casino_id, FEATURES_TABLE, [
            {"casino_id": casino_id, "feature": feature, "type": kind}
            for kind, features in (
                ("positive", parsed.features.positive),
                ("negative", parsed.features.negative),
                ("interesting", parsed.features.interesting),
            )
            for feature in features
        ], prefix)

        for method in parsed.payment_methods:
            await self._link_reference(
                casino_id, "payment_methods", "casino_payment_methods", "payment_method_id",
                method.name, {"logo_url": method.logo_url}, prefix,
            )

        for lic in parsed.licenses:
            await self._link_reference(
                casino_id, "licenses", "casino_licenses", "license_id",
                lic.name, {"country_code": lic.country_code}, prefix,
                overwrite=True,
            )

        for game_type in parsed.game_types:
            await self._link_reference(
                casino_id, "game_types", "casino_game_types", "game_type_id",
                game_type, {}, prefix,
            )

        for provider in parsed.game_providers:
            await self._link_reference(
                casino_id, "game_providers", "casino_game_providers", "game_provider_id",
                provider.name, {"logo_url": provider.logo_url}, prefix,
            )

        await self._save_languages(casino_id, parsed, prefix)

        bonuses = []
        if parsed.bonuses.no_deposit:
            bonuses.append(bonus_row(casino_id, "no_deposit", parsed.bonuses.no_deposit))
        if parsed.bonuses.deposit:
            bonuses.append(bonus_row(casino_id, "deposit", parsed.bonuses.deposit))
        await self._replace_rows(casino_id, BONUSES_TABLE, bonuses, prefix)

        await self._replace_rows(casino_id, SCREENSHOTS_TABLE, [
            {"casino_id": casino_id, "url": s.url, "alt_text": s.alt_text}
            for s in parsed.screenshots
        ], prefix)

    async def _replace_rows(
        self, casino_id: int, table: str, rows: list[dict], prefix: str
    ) -> None:
        """Delete the casino's rows in `table`, then insert `rows`."""
        try:
            await self._db.delete(table, eq={"casino_id": casino_id})
        except SupabaseError as exc:
            logger.error("%sError deleting existing %s: %s", prefix, table, exc.message)
        if not rows:
            return
        try:
            await self._db.insert(table, rows)
        except SupabaseError as exc:
            logger.error("%sError inserting %s: %s", prefix, table, exc.message)
            return
        logger.info("%sSaved %d %s rows for casino %s", prefix, len(rows), table, casino_id)

    async def _link_reference(
        self,
        casino_id: int,
        table: str,
        join_table: str,
        fk_column: str,
        name: str,
        extra: dict,
        prefix: str,
        overwrite: bool = False,
    ) -> None:
        """Find-or-create a shared reference row by name and link it once.

        Values in `extra` are backfilled on an existing row when it has none;
        with `overwrite` they replace a differing stored value.
        """
        try:
            columns = ",".join(["id", *extra])
            existing = await self._db.select_one(table, columns, ilike={"name": name})

            if existing:
                ref_id = existing["id"]
                updates = {
                    key: value
                    for key, value in extra.items()
                    if value and (overwrite or not existing.get(key)) and existing.get(key) != value
                }
                if updates:
                    await self._db.update(table, updates, eq={"id": ref_id})
            else:
                rows = await self._db.insert(table, {"name": name, **extra})
                ref_id = rows[0]["id"]

            link = await self._db.select_one(
                join_table, "id", eq={"casino_id": casino_id, fk_column: ref_id}
            )
            if link is None:
                await self._db.insert(join_table, {"casino_id": casino_id, fk_column: ref_id})
        except SupabaseError as exc:
            logger.error("%sError saving %s %r: %s", prefix, table, name, exc.message)

    async def _save_languages(self, casino_id: int, parsed: ParsedCasino, prefix: str) -> None:
        try:
            await self._db.delete(CASINO_LANGUAGES_TABLE, eq={"casino_id": casino_id})
        except SupabaseError as exc:
            logger.error("%sError deleting existing language relations: %s", prefix, exc.message)

        for language in parsed.languages:
            try:
                existing = await self._db.select_one(
                    LANGUAGES_TABLE,
                    "id",
                    eq={"country_code": language.country_code},
                    ilike={"name": language.name},
                )
                if existing:
                    language_id = existing["id"]
                else:
                    rows = await self._db.insert(LANGUAGES_TABLE, {
                        "name": language.name,
                        "country_code": language.country_code,
                    })
                    language_id = rows[0]["id"]

                await self._db.insert(CASINO_LANGUAGES_TABLE, {
                    "casino_id": casino_id,
                    "language_id": language_id,
                    "type": language.type,
                })
            except SupabaseError as exc:
                logger.error("%sError saving language %s: %s", prefix, language.name, exc.message)
