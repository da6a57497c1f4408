import logging
from typing import Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from clock import SystemClock
from csv_utils import export_transactions
from database import get_session, init_db
from periods import Period, resolve_period
from schemas import BudgetIn, TransactionIn
from services import (
    AnalyticsService,
    BudgetNotFound,
    BudgetService,
    TransactionNotFound,
    TransactionService,
    transaction_to_dict,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Finance Tracker")
clock = SystemClock()


@app.on_event("startup")
def startup_event():
    init_db()
    logger.info("Database tables ensured")


def period_from_request(request: Request) -> Period:
    period_slug = request.query_params.get("period")
    start = request.query_params.get("start")
    end = request.query_params.get("end")
    try:
        return resolve_period(period_slug, start, end, today=clock.now().date())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/api/transactions")
def list_transactions(request: Request, db: Session = Depends(get_session)):
    period = period_from_request(request)
    service = TransactionService(db)
    items = service.list_all() if period.slug == "all" else service.list_for_period(period)
    return [transaction_to_dict(txn) for txn in items]


@app.post("/api/transactions", status_code=201)
def create_transaction(data: TransactionIn, db: Session = Depends(get_session)):
    try:
        txn = TransactionService(db).create(data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return transaction_to_dict(txn)


@app.delete("/api/transactions", status_code=200)
def clear_transactions(db: Session = Depends(get_session)):
    return {"deleted": TransactionService(db).clear()}


@app.post("/api/transactions/import", status_code=201)
def import_transactions(
    items: list[TransactionIn] = Body(...), db: Session = Depends(get_session)
):
    try:
        imported = TransactionService(db).import_batch(items)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"imported": len(imported)}


@app.get("/api/transactions/export.json")
def export_transactions_json(db: Session = Depends(get_session)):
    return Response(
        content=TransactionService(db).export_json(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="transactions.json"'},
    )


@app.get("/api/transactions/export.csv")
def export_transactions_csv(request: Request, db: Session = Depends(get_session)):
    period = period_from_request(request)
    service = TransactionService(db)
    items = service.list_all() if period.slug == "all" else service.list_for_period(period)
    filename = f"transactions_{period.slug}.csv"
    return StreamingResponse(
        iter([export_transactions(items)]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/api/transactions/{transaction_id}")
def get_transaction(transaction_id: str, db: Session = Depends(get_session)):
    try:
        return transaction_to_dict(TransactionService(db).get(transaction_id))
    except TransactionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.put("/api/transactions/{transaction_id}")
def update_transaction(
    transaction_id: str, data: TransactionIn, db: Session = Depends(get_session)
):
    try:
        txn = TransactionService(db).update(transaction_id, data)
    except TransactionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return transaction_to_dict(txn)


@app.delete("/api/transactions/{transaction_id}", status_code=204)
def delete_transaction(transaction_id: str, db: Session = Depends(get_session)):
    try:
        TransactionService(db).delete(transaction_id)
    except TransactionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.get("/api/budgets")
def list_budgets(db: Session = Depends(get_session)):
    return BudgetService(db).list_all()


@app.post("/api/budgets")
def upsert_budget(data: BudgetIn, db: Session = Depends(get_session)):
    try:
        return BudgetService(db).upsert(data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/api/budgets/summary")
def budget_summary(db: Session = Depends(get_session)):
    return AnalyticsService(db, clock).budget_summaries()


@app.delete("/api/budgets/{budget_id}", status_code=204)
def delete_budget(budget_id: str, db: Session = Depends(get_session)):
    try:
        BudgetService(db).delete(budget_id)
    except BudgetNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.get("/api/dashboard")
def dashboard(request: Request, db: Session = Depends(get_session)):
    period = period_from_request(request)
    return AnalyticsService(db, clock).dashboard(period)


@app.get("/api/insights")
def insights(request: Request, db: Session = Depends(get_session)):
    period = period_from_request(request)
    return AnalyticsService(db, clock).insights(period)


@app.get("/api/duplicates")
def duplicates(db: Session = Depends(get_session)):
    groups = AnalyticsService(db, clock).duplicate_groups()
    return [[transaction_to_dict(txn) for txn in group] for group in groups]


@app.get("/api/forecast")
def forecast(periods: Optional[int] = None, db: Session = Depends(get_session)):
    try:
        return AnalyticsService(db, clock).forecast(periods)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
