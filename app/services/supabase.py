import logging

import httpx

from app.exceptions.custom import SupabaseError

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``ilike`` behaves as case-insensitive equality.

    PostgREST rewrites every ``*`` to ``%`` before the query runs, so a literal
    ``*`` cannot be escaped; it is narrowed to ``_`` (exactly one character).
    """
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped.replace("*", "_")


def _quote_in(value) -> str:
    text = str(value)
    if any(c in text for c in ',()"'):
        return '"' + text.replace('"', '\\"') + '"'
    return text


def _filter_params(
    eq: dict | None = None,
    ilike: dict | None = None,
    in_: dict | None = None,
) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for column, value in (eq or {}).items():
        if value is None:
            params.append((column, "is.null"))
        else:
            params.append((column, f"eq.{value}"))
    for column, value in (ilike or {}).items():
        params.append((column, f"ilike.{_escape_like(str(value))}"))
    for column, values in (in_ or {}).items():
        params.append((column, "in.(" + ",".join(_quote_in(v) for v in values) + ")"))
    return params


class SupabaseService:
    """Table-scoped reads and writes against a Supabase (PostgREST) project."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, service_key: str):
        self._client = client
        self._base_url = base_url.rstrip("/") + REST_PATH
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }

    def _url(self, table: str) -> str:
        return f"{self._base_url}/{table}"

    async def _send(self, method: str, action: str, table: str, **kwargs) -> httpx.Response:
        """Issue one request; transport failures and error statuses raise SupabaseError."""
        try:
            resp = await self._client.request(method, self._url(table), **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Supabase %s on %s failed: %s", action, table, exc)
            raise SupabaseError(f"{action} {table}: {exc}") from exc
        self._check(resp, action, table)
        return resp

    @staticmethod
    def _check(resp: httpx.Response, action: str, table: str) -> None:
        if resp.status_code >= 400:
            logger.error("Supabase %s on %s failed (%d): %s", action, table, resp.status_code, resp.text)
            raise SupabaseError(f"{action} {table}: {resp.text}", status_code=resp.status_code)

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: dict | None = None,
        ilike: dict | None = None,
        in_: dict | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        params = [("select", columns), *_filter_params(eq, ilike, in_)]
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        resp = await self._send("GET", "select", table, params=params, headers=self._headers)
        return resp.json()

    async def select_one(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: dict | None = None,
        ilike: dict | None = None,
    ) -> dict | None:
        rows = await self.select(table, columns, eq=eq, ilike=ilike, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, rows: dict | list[dict]) -> list[dict]:
        resp = await self._send(
            "POST",
            "insert",
            table,
            json=rows,
            headers={**self._headers, "Prefer": "return=representation"},
        )
        return resp.json()

    async def update(self, table: str, values: dict, *, eq: dict) -> list[dict]:
        if not eq:
            raise ValueError("update requires at least one filter")
        resp = await self._send(
            "PATCH",
            "update",
            table,
            params=_filter_params(eq),
            json=values,
            headers={**self._headers, "Prefer": "return=representation"},
        )
        return resp.json()

    async def delete(self, table: str, *, eq: dict) -> None:
        if not eq:
            raise ValueError("delete requires at least one filter")
        await self._send("DELETE", "delete", table, params=_filter_params(eq), headers=self._headers)
