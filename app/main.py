import json
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .db import init_db
from .errors import InvalidAccount, LedgerError, MissingField, StoreUnavailable
from .logging_utils import configure_logging, get_logger
from .logic import validate_account
from .models import Account, format_amount
from .repo import get_balance, get_balances, list_recent_txns, list_txns
from .service import create_transaction, delete_transaction, update_transaction
from .settings import Settings, get_settings

LOGGER = get_logger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent

ERROR_STATUS = {
    "MissingField": 400,
    "InvalidAccount": 400,
    "InvalidAmount": 400,
    "Unauthorized": 403,
    "NotFound": 404,
    "StoreUnavailable": 503,
}


def _when(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime(
            "%Y-%m-%d %H:%M"
        )
    except ValueError:
        return value


def _balances_payload(balances: dict) -> dict:
    return {account.value: format_amount(amount) for account, amount in balances.items()}


async def _read_payload(request: Request) -> dict:
    """Return write fields from either a JSON or a form-encoded body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.body()
        if not body.strip():
            return {}
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise MissingField("request body is not valid JSON") from exc
        return payload if isinstance(payload, dict) else {}
    form = await request.form()
    return dict(form)


def _write_fields(payload: dict) -> dict:
    return {
        "account": payload.get("account") or payload.get("child"),
        "amount": payload.get("amount"),
        "reason": payload.get("reason"),
        "direction": payload.get("direction"),
        "password": payload.get("password"),
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    init_db(settings)

    app = FastAPI(title="Kids Bank")
    app.mount(
        "/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static"
    )
    templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))
    templates.env.filters["money"] = format_amount
    templates.env.filters["when"] = _when

    db_path = settings.db_path

    def _acknowledge(**body) -> dict:
        # The write is already committed; a failed balance read only drops the refresh data.
        try:
            body["balances"] = _balances_payload(get_balances(db_path))
        except StoreUnavailable:
            LOGGER.warning("Balances unavailable after committed write")
        return {"ok": True, **body}

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        return JSONResponse(
            status_code=ERROR_STATUS.get(exc.reason, 500),
            content={"error": exc.message, "reason": exc.reason},
        )

    @app.get("/", response_class=HTMLResponse)
    def admin(request: Request):
        return templates.TemplateResponse(
            request,
            "admin.html",
            {
                "accounts": list(Account),
                "balances": get_balances(db_path),
                "transactions": list_recent_txns(db_path, settings.recent_limit),
                "password_required": bool(settings.admin_password),
                "currency": settings.currency,
            },
        )

    @app.get("/bank/{account}", response_class=HTMLResponse)
    def statement(request: Request, account: str):
        try:
            valid_account = validate_account(account)
        except InvalidAccount as exc:
            raise HTTPException(status_code=404, detail="Not found") from exc
        return templates.TemplateResponse(
            request,
            "statement.html",
            {
                "accounts": list(Account),
                "account": valid_account,
                "balance": get_balance(db_path, valid_account),
                "transactions": list_txns(db_path, valid_account),
                "currency": settings.currency,
            },
        )

    @app.get("/api/balances")
    def balances():
        return _balances_payload(get_balances(db_path))

    @app.get("/api/transactions")
    def transactions(account: str | None = None, limit: int | None = None):
        if account:
            rows = list_txns(db_path, account, limit=limit)
        else:
            rows = list_recent_txns(
                db_path, settings.recent_limit if limit is None else limit
            )
        return [txn.as_dict() for txn in rows]

    @app.post("/tx", status_code=201)
    async def create_tx(request: Request):
        fields = _write_fields(await _read_payload(request))
        txn = await run_in_threadpool(
            create_transaction,
            db_path,
            admin_password=settings.admin_password,
            **fields,
        )
        return await run_in_threadpool(_acknowledge, transaction=txn.as_dict())

    @app.post("/tx/{txn_id}")
    async def update_tx(txn_id: int, request: Request):
        fields = _write_fields(await _read_payload(request))
        txn = await run_in_threadpool(
            update_transaction,
            db_path,
            txn_id,
            admin_password=settings.admin_password,
            **fields,
        )
        return await run_in_threadpool(_acknowledge, transaction=txn.as_dict())

    @app.post("/tx/{txn_id}/delete")
    async def delete_tx(txn_id: int, request: Request):
        payload = await _read_payload(request)
        await run_in_threadpool(
            delete_transaction,
            db_path,
            txn_id,
            password=payload.get("password"),
            admin_password=settings.admin_password,
        )
        return await run_in_threadpool(_acknowledge)

    LOGGER.info("Kids Bank app created with database %s", db_path)
    return app
