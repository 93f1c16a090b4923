from collections import defaultdict
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from httpx import ASGITransport

from app.exceptions.custom import SupabaseError
from app.jobs import JobStore
from app.services.batch import BatchService
from app.services.casino_parser import CasinoParserService


class FakeSupabase:
    """In-memory stand-in for SupabaseService.

    Filters behave like the PostgREST ones the service sends: ``eq`` is exact,
    ``ilike`` is case-insensitive equality. `fail_on` holds (action, table)
    pairs that raise SupabaseError.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = defaultdict(list)
        self.fail_on: set[tuple[str, str]] = set()
        self._next_id: dict[str, int] = defaultdict(int)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def rows(self, table: str) -> list[dict]:
        return self.tables[table]

    def _maybe_fail(self, action: str, table: str) -> None:
        if (action, table) in self.fail_on:
            raise SupabaseError(f"{action} {table}: simulated failure", status_code=500)

    @staticmethod
    def _matches(row: dict, eq=None, ilike=None, in_=None) -> bool:
        for column, value in (eq or {}).items():
            if row.get(column) != value:
                return False
        for column, value in (ilike or {}).items():
            if str(row.get(column) or "").lower() != str(value).lower():
                return False
        for column, values in (in_ or {}).items():
            if row.get(column) not in list(values):
                return False
        return True

    async def select(
        self,
        table,
        columns="*",
        *,
        eq=None,
        ilike=None,
        in_=None,
        order=None,
        descending=False,
        limit=None,
    ):
        self._maybe_fail("select", table)
        found = [dict(r) for r in self.tables[table] if self._matches(r, eq, ilike, in_)]
        if order:
            found.sort(key=lambda r: (r.get(order) is None, r.get(order) or ""), reverse=descending)
        if limit is not None:
            found = found[:limit]
        return found

    async def select_one(self, table, columns="*", *, eq=None, ilike=None):
        rows = await self.select(table, columns, eq=eq, ilike=ilike, limit=1)
        return rows[0] if rows else None

    async def insert(self, table, rows):
        self._maybe_fail("insert", table)
        created = []
        for row in rows if isinstance(rows, list) else [rows]:
            self._next_id[table] += 1
            self._clock += timedelta(seconds=1)
            stored = {"id": self._next_id[table], "created_at": self._clock.isoformat(), **row}
            self.tables[table].append(stored)
            created.append(dict(stored))
        return created

    async def update(self, table, values, *, eq):
        self._maybe_fail("update", table)
        updated = []
        for row in self.tables[table]:
            if self._matches(row, eq):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def delete(self, table, *, eq):
        self._maybe_fail("delete", table)
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, eq)]


CASINO_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><title>Lucky Star Casino Review 2024 - Casino Guru</title></head>
<body>
<div class="casino-detail-main-col" data-module="modules/casino-detail-tabs" data-casino-id="4821">
  <img class="casino-logo" src="https://static.casino.guru/logos/lucky-star.png" alt="Lucky Star Casino Logo">
  <h1>Lucky Star Casino Review</h1>
  <div class="rating"><b>8,5</b>/10</div>

  <div class="casino-detail-box-description">
    <h2>About</h2>
    <p class="lead" style="color:red">Lucky Star is a <a href="https://luckystar.example" rel="nofollow" class="ext">modern casino</a>.</p>
    <div><span>Licensed since 2019.</span></div>
  </div>

  <div class="info-col-section info-col-section-revenues">
    <div class="my-m"><label class="info-col-section-header">Owner</label><b>Star Group Ltd</b></div>
    <div class="my-m"><label class="info-col-section-header">Operator</label><b>Star Ops N.V.</b></div>
    <div class="my-m"><label class="info-col-section-header">Established</label><b>2019</b></div>
    <div class="my-m"><label class="info-col-section-header">Estimated annual revenues</label><b>$5,000,000</b></div>
  </div>

  <div class="payments-withdrawal">
    <div class="info-col-section">
      <div class="info-col-section-header">Withdrawal limits</div>
      <div class="flex">
        <div class="mr-m"><div class="neo-fs-20">$5,000</div><div class="fs-xs">per day</div></div>
        <div class="mr-m"><div class="neo-fs-20">$20,000</div><div class="fs-xs">per week</div></div>
        <div class="mr-m"><div class="neo-fs-20">$50,000</div><div class="fs-xs">per month</div></div>
      </div>
    </div>
  </div>

  <div class="casino-detail-box-pros">
    <div class="row">
      <div class="col">Positives</div>
      <ul><li>Fast withdrawals</li><li>Large game selection</li></ul>
      <div class="col">Negatives</div>
      <ul><li>High wagering requirements</li></ul>
      <div class="col">Interesting facts</div>
      <ul><li>Accepts cryptocurrencies</li></ul>
    </div>
  </div>

  <ul class="license-list">
    <li><i class="flag-icon flag-icon-gb flag-icon-mt"></i><a class="link-secondary" href="/licenses/mga">Malta Gaming Authority</a></li>
    <li><a class="link-secondary" href="/licenses/curacao">Curacao eGaming</a></li>
  </ul>

  <ul class="game-types-list"><li>Slots</li><li>Roulette</li><li>Live Games</li></ul>

  <div id="popover-payment-methods">
    <div class="casino-detail-logos-item"><a title="Visa"><img data-src="https://static.casino.guru/pm/visa.svg" src="placeholder.gif" alt="Visa logo"></a></div>
    <div class="casino-detail-logos-item"><img src="placeholder.gif" alt="Skrill"></div>
  </div>

  <div id="popover-game-providers">
    <div class="casino-detail-logos-item"><a title="NetEnt"><img data-src="https://static.casino.guru/gp/netent.svg" alt="NetEnt"></a></div>
    <div class="casino-detail-logos-item"><a title="Pragmatic Play"><img data-src="https://static.casino.guru/gp/pragmatic.svg" alt="Pragmatic"></a></div>
  </div>

  <div class="info-col-bonus-wrapper-1">
    <div class="bonus-name-1">20 Free Spins</div>
    <div class="bonus-name-2">No deposit bonus</div>
    <span data-popover-content="#popover-bonus-nd">Conditions</span>
    <div id="popover-bonus-nd" class="hidden">
      <div class="bonus-conditions-line"><svg><use xlink:href="#base_category_ico_bonuses"></use></svg><div>Free spins</div></div>
      <div class="bonus-conditions-line"><svg><use xlink:href="#bonus_ico_wagering_requirements"></use></svg><div><span>Wagering requirements: <strong>35x</strong></span></div></div>
      <div class="bonus-conditions-line"><svg><use xlink:href="#bonus_ico_maximum_cashout"></use></svg><div><span>Maximum cashout: <strong>$100</strong></span></div></div>
      <div class="bonus-conditions-line"><svg><use xlink:href="#bonus_ico_stop_watch"></use></svg><div>FAST <span>Bonus expiration: <strong>7 days</strong></span></div></div>
    </div>
  </div>

  <div class="info-col-bonus-wrapper">
    <div class="bonus-name-1">100% up to $500</div>
    <span data-popover-content="#popover-bonus-dep">Conditions</span>
    <div id="popover-bonus-dep" class="hidden">
      <div class="bonus-conditions-line"><svg><use xlink:href="#bonus_ico_wagering_requirements"></use></svg><div>Wagering requirements: 40x</div></div>
      <div class="bonus-conditions-line"><svg><use xlink:href="#bonus_ico_maximum_cashout"></use></svg><div><span>Minimum deposit: <strong>$20</strong></span><span>Maximum bet: <strong>$5</strong></span></div></div>
    </div>
  </div>

  <div class="casino-detail-box-screenshots">
    <figure class="gallery-image-figure"><img data-src="https://static.casino.guru/shots/lobby.jpg" src="placeholder.gif" alt="Lobby"></figure>
    <img src="https://static.casino.guru/shots/games.jpg">
  </div>

  <div class="casino-detail-box-languages">
    <div class="language-option">
      <div class="flag-icon-circle-medium"><i class="flag-icon flag-icon-gb"></i></div>
      <div class="middle">Website: English</div>
      <a data-popover-content="#popover-lang-website">+1</a>
    </div>
    <div id="popover-lang-website" class="hidden">
      <div class="flex items-center"><i class="flag-icon flag-icon-gb"></i><span>English</span></div>
      <div class="flex items-center"><i class="flag-icon flag-icon-gb flag-icon-de"></i><span>German</span></div>
    </div>
    <div class="language-option">
      <div class="flag-icon-circle-medium"><i class="flag-icon flag-icon-fr"></i></div>
      <div class="middle">Customer support</div>
    </div>
  </div>
</div>
</body>
</html>
"""

@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def casino_page():
    return CASINO_PAGE


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "test-service-key")
    monkeypatch.setenv("FETCH_MAX_ATTEMPTS", "1")
    monkeypatch.setenv("FETCH_RETRY_DELAY", "0")
    monkeypatch.setenv("COURTESY_DELAY", "0")
    monkeypatch.delenv("RELAY_URL", raising=False)


@pytest.fixture
async def client(mock_env, fake_db):
    from app.main import app, lifespan

    async with lifespan(app):
        # Route tests persist into the in-memory datastore
        jobs = JobStore(fake_db)
        parser = CasinoParserService(fake_db, app.state.html_fetcher, jobs, courtesy_delay=0)
        app.state.job_store = jobs
        app.state.parser_service = parser
        app.state.batch_service = BatchService(parser, jobs)

        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
