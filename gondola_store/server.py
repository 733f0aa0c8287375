"""HTTP server exposing the store helpers as a JSON API."""

from __future__ import annotations

import errno
import json
import logging
from dataclasses import asdict
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict, Optional, Tuple

from .catalog import UnknownPlanError, catalog_payload
from .config import (
    DEFAULT_PER_PAGE,
    LISTEN_BACKLOG,
    MAX_BODY_BYTES as MAX_BODY_BYTES_CONFIG,
    MAX_PAGE_BUTTONS,
    MAX_STATEMENT_ROWS as MAX_STATEMENT_ROWS_CONFIG,
    MAX_TOTAL_PAGES,
    PAGE_BUTTONS,
)
from .formatting import parse_instant
from .leaderboard import LEADERBOARD_KINDS, InvalidLeaderboardRecord, build_leaderboard, paginate_leaderboard
from .pagination import compute_page_window, page_labels
from .password_policy import check_password
from .proration import SubscriptionSnapshot, quote_plan_change
from .transactions import InvalidTransaction, paginate_history, parse_transaction

logger = logging.getLogger(__name__)

ValidationError = Tuple[int, Dict[str, Any]]
Validated = Tuple[Optional[Dict[str, Any]], Optional[ValidationError]]
Route = Tuple[Callable[[Dict[str, Any]], Validated], Callable[[Dict[str, Any]], Dict[str, Any]]]

DISCONNECT_ERRNOS = {
    errno.EPIPE,
    errno.ECONNRESET,
    errno.ETIMEDOUT,
}


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


def is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


def load_render_statement() -> Callable[..., bytes]:
    try:
        from .statement import render_statement
    except ModuleNotFoundError as exc:
        if exc.name == "fpdf":
            raise DependencyError(
                "Missing dependency 'fpdf'. Install project dependencies with "
                "'pip install -e .'."
            ) from exc
        raise
    return render_statement


def _invalid(detail: str, error: str = "invalid_payload", status: int = 400) -> ValidationError:
    return status, {"error": error, "detail": detail}


def _int_field(
    payload: Dict[str, Any],
    name: str,
    default: Optional[int] = None,
) -> Tuple[Optional[int], Optional[ValidationError]]:
    value = payload.get(name, default)
    if value is None:
        return None, _invalid(f"'{name}' is required.")
    if isinstance(value, bool) or not isinstance(value, int):
        return None, _invalid(f"'{name}' must be an integer.")
    return value, None


def parse_json_body(body: bytes) -> Validated:
    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError:
        return None, _invalid("Body must be UTF-8 encoded JSON.", "invalid_encoding")
    except json.JSONDecodeError as exc:
        return None, _invalid(
            f"{exc.msg} (line {exc.lineno}, column {exc.colno})",
            "invalid_json",
        )

    if not isinstance(payload, dict):
        return None, _invalid("JSON root must be an object.")
    return payload, None


def validate_window_request(payload: Dict[str, Any]) -> Validated:
    current_page, error = _int_field(payload, "current_page", 1)
    if error:
        return None, error
    total_pages, error = _int_field(payload, "total_pages")
    if error:
        return None, error
    max_buttons, error = _int_field(payload, "max_buttons", PAGE_BUTTONS)
    if error:
        return None, error
    if max_buttons < 3 or max_buttons > MAX_PAGE_BUTTONS:
        return None, _invalid(f"'max_buttons' must be between 3 and {MAX_PAGE_BUTTONS}.")
    if total_pages > MAX_TOTAL_PAGES:
        return None, _invalid(
            f"'total_pages' is {total_pages}; maximum is {MAX_TOTAL_PAGES}.",
            "too_many_pages",
            413,
        )

    total_pages = max(0, total_pages)
    current_page = max(1, min(current_page, max(1, total_pages)))
    return {
        "current_page": current_page,
        "total_pages": total_pages,
        "max_buttons": max_buttons,
    }, None


def validate_history_request(payload: Dict[str, Any]) -> Validated:
    records = payload.get("transactions")
    if not isinstance(records, list):
        return None, _invalid("'transactions' must be an array.")
    page, error = _int_field(payload, "page", 1)
    if error:
        return None, error
    per_page, error = _int_field(payload, "per_page", DEFAULT_PER_PAGE)
    if error:
        return None, error
    if per_page < 1:
        return None, _invalid("'per_page' must be at least 1.")

    try:
        transactions = [parse_transaction(record) for record in records]
    except InvalidTransaction as exc:
        return None, _invalid(str(exc))
    return {"transactions": transactions, "page": page, "per_page": per_page}, None


def validate_quote_request(payload: Dict[str, Any]) -> Validated:
    selected_plan = payload.get("selected_plan")
    if not isinstance(selected_plan, str) or not selected_plan:
        return None, _invalid("'selected_plan' must be a plan id.")

    now = None
    if payload.get("now") is not None:
        try:
            now = parse_instant(payload["now"])
        except ValueError as exc:
            return None, _invalid(str(exc))

    subscription = None
    raw = payload.get("subscription")
    if raw is not None:
        if not isinstance(raw, dict):
            return None, _invalid("'subscription' must be an object.", "invalid_subscription")
        plan_id = raw.get("plan_id")
        if not isinstance(plan_id, str) or not plan_id:
            return None, _invalid("'subscription.plan_id' is required.", "invalid_subscription")
        try:
            start_date = parse_instant(raw.get("start_date"))
            end_date = parse_instant(raw.get("end_date"))
        except ValueError as exc:
            return None, _invalid(str(exc), "invalid_subscription")
        if end_date <= start_date:
            return None, _invalid(
                "'subscription.end_date' must be after 'subscription.start_date'.",
                "invalid_subscription",
            )
        subscription = SubscriptionSnapshot(plan_id, start_date, end_date)

    return {"selected_plan": selected_plan, "subscription": subscription, "now": now}, None


def validate_password_request(payload: Dict[str, Any]) -> Validated:
    password = payload.get("password")
    if not isinstance(password, str):
        return None, _invalid("'password' must be a string.")
    return {"password": password}, None


def validate_leaderboard_request(payload: Dict[str, Any]) -> Validated:
    kind = payload.get("kind")
    if kind not in LEADERBOARD_KINDS:
        return None, _invalid(f"'kind' must be one of {', '.join(LEADERBOARD_KINDS)}.")
    records = payload.get("records")
    if not isinstance(records, list):
        return None, _invalid("'records' must be an array.")
    page, error = _int_field(payload, "page", 1)
    if error:
        return None, error
    per_page, error = _int_field(payload, "per_page", DEFAULT_PER_PAGE)
    if error:
        return None, error
    if per_page < 1:
        return None, _invalid("'per_page' must be at least 1.")

    try:
        entries = build_leaderboard(kind, records)
    except InvalidLeaderboardRecord as exc:
        return None, _invalid(str(exc))
    return {"kind": kind, "entries": entries, "page": page, "per_page": per_page}, None


def validate_statement_request(payload: Dict[str, Any], max_rows: int) -> Validated:
    records = payload.get("transactions", [])
    if records is None:
        records = []
    if not isinstance(records, list):
        return None, _invalid("'transactions' must be an array.")
    if len(records) > max_rows:
        return None, _invalid(
            f"Statement would list {len(records)} transactions; maximum is {max_rows}.",
            "statement_too_large",
            413,
        )
    try:
        for record in records:
            parse_transaction(record)
    except InvalidTransaction as exc:
        return None, _invalid(str(exc))
    return payload, None


def window_response(request: Dict[str, Any]) -> Dict[str, Any]:
    entries = compute_page_window(
        request["current_page"],
        request["total_pages"],
        request["max_buttons"],
    )
    return {
        "current_page": request["current_page"],
        "total_pages": request["total_pages"],
        "pages": page_labels(entries),
    }


def history_response(request: Dict[str, Any]) -> Dict[str, Any]:
    history = paginate_history(
        request["transactions"],
        request["page"],
        request["per_page"],
        PAGE_BUTTONS,
    )
    state = history.state
    return {
        "transactions": history.rows,
        "page": state.page,
        "per_page": history.per_page,
        "total_items": history.total_items,
        "total_pages": state.total_pages,
        "has_previous": state.has_previous,
        "has_next": state.has_next,
        "pages": history.window,
    }


def quote_response(request: Dict[str, Any]) -> Dict[str, Any]:
    quote = quote_plan_change(
        request["selected_plan"],
        subscription=request["subscription"],
        now=request["now"],
    )
    return asdict(quote)


def password_response(request: Dict[str, Any]) -> Dict[str, Any]:
    results = check_password(request["password"])
    return {
        "valid": all(result.passed for result in results),
        "rules": [asdict(result) for result in results],
    }


def leaderboard_response(request: Dict[str, Any]) -> Dict[str, Any]:
    board = paginate_leaderboard(
        request["entries"],
        request["page"],
        request["per_page"],
        PAGE_BUTTONS,
    )
    state = board.state
    return {
        "kind": request["kind"],
        "entries": [asdict(entry) for entry in board.entries],
        "page": state.page,
        "per_page": board.per_page,
        "total_entries": board.total_entries,
        "total_pages": state.total_pages,
        "has_previous": state.has_previous,
        "has_next": state.has_next,
        "pages": board.window,
    }


class StoreHandler(BaseHTTPRequestHandler):
    MAX_BODY_BYTES = MAX_BODY_BYTES_CONFIG
    MAX_STATEMENT_ROWS = MAX_STATEMENT_ROWS_CONFIG

    JSON_ROUTES: Dict[str, Route] = {
        "/pagination/window": (validate_window_request, window_response),
        "/transactions/page": (validate_history_request, history_response),
        "/subscriptions/quote": (validate_quote_request, quote_response),
        "/password/check": (validate_password_request, password_response),
        "/leaderboard/page": (validate_leaderboard_request, leaderboard_response),
    }

    def _write_response(self, status: int, content_type: str, body: bytes) -> bool:
        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
            return True
        except Exception as exc:
            if is_client_disconnect(exc):
                return False
            raise

    def _send_json(self, status: int, payload: Dict[str, Any]) -> bool:
        body = json.dumps(payload).encode("utf-8")
        return self._write_response(status, "application/json", body)

    def _send_error(self, error: ValidationError) -> None:
        status, payload = error
        self._send_json(status, payload)

    def _read_body(self) -> Optional[bytes]:
        header = self.headers.get("Content-Length")
        if header is None:
            self._send_error(
                _invalid("Content-Length header is required.", "missing_content_length", 411)
            )
            return None

        try:
            content_length = int(header)
        except ValueError:
            self._send_error(_invalid("Content-Length must be an integer.", "invalid_content_length"))
            return None

        if content_length <= 0:
            self._send_error(_invalid("Request body cannot be empty.", "empty_body"))
            return None

        if content_length > self.MAX_BODY_BYTES:
            self._send_error(
                _invalid(f"Body exceeds {self.MAX_BODY_BYTES} bytes.", "payload_too_large", 413)
            )
            return None

        try:
            return self.rfile.read(content_length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def do_POST(self) -> None:
        route = self.JSON_ROUTES.get(self.path)
        if route is None and self.path != "/statement":
            self._send_error(_invalid("Unsupported endpoint.", "not_found", 404))
            return

        body = self._read_body()
        if body is None:
            return

        payload, error = parse_json_body(body)
        if error is not None:
            self._send_error(error)
            return

        if route is None:
            self._handle_statement(payload)
            return

        validate, respond = route
        request, error = validate(payload)
        if error is not None:
            self._send_error(error)
            return

        try:
            response = respond(request)
        except UnknownPlanError as exc:
            self._send_error(_invalid(f"Unknown plan {exc.args[0]!r}.", "unknown_plan", 404))
            return
        self._send_json(200, response)

    def _handle_statement(self, payload: Dict[str, Any]) -> None:
        request, error = validate_statement_request(payload, self.MAX_STATEMENT_ROWS)
        if error is not None:
            self._send_error(error)
            return

        try:
            pdf_bytes = load_render_statement()(request)
        except Exception as exc:
            logger.exception("Statement render failed")
            self._send_json(500, {"error": "render_failed", "detail": str(exc)})
            return

        self._write_response(200, "application/pdf", pdf_bytes)

    def do_GET(self) -> None:
        if self.path in ("/", "/health", "/healthz", "/ready"):
            self._send_json(200, {"status": "ok"})
            return
        if self.path == "/catalog":
            self._send_json(200, catalog_payload())
            return
        self._send_error(_invalid("Unsupported endpoint.", "not_found", 404))

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if is_client_disconnect(exc):
                return
            raise

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class StoreHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True
    request_queue_size = LISTEN_BACKLOG


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    load_render_statement()
    server = StoreHTTPServer((host, port), StoreHandler)
    logger.info("Gondola store API listening on http://%s:%d", host, port)
    try:
        server.serve_forever()
    finally:
        server.server_close()


