"""Local stand-ins for the transactions API and the Gemini endpoint.

Run with: uvicorn stubs.api_server:app --port 8001
then point TRANSACTIONS_API_BASE and GEMINI_API_BASE at http://localhost:8001.
"""

import json
from datetime import date, timedelta
from typing import List, Optional

from fastapi import FastAPI, HTTPException

app = FastAPI(title="Forecast Stub Server", version="1.0.0")

# (category, amount, every_n_days)
SPENDING_PATTERN = [
    ("Food", 42.50, 3),
    ("Transport", 15.00, 2),
    ("Utilities", 120.00, 30),
    ("Entertainment", 60.00, 14),
]

CANNED_FORECAST = {
    "totalForecast": 1450.0,
    "categoryForecasts": {"Food": 430.0, "Transport": 225.0, "Utilities": 120.0, "Entertainment": 130.0},
    "trend": "STABLE",
    "confidence": 75,
    "recommendations": ["Plan grocery shopping weekly to reduce food spending"],
    "insights": ["Food is your largest spending category"],
}


def generate_transactions(today: date, days: int = 180) -> List[dict]:
    """Deterministic expense history plus a monthly salary"""
    transactions = []
    for offset in range(days):
        day = today - timedelta(days=offset)
        for category, amount, every in SPENDING_PATTERN:
            if offset % every == 0:
                transactions.append({
                    "id": f"{category.lower()}_{offset}",
                    "type": "EXPENSE",
                    "amount": amount,
                    "category": {"name": category} if category == "Utilities" else category,
                    "date": day.isoformat(),
                })
        if day.day == 1:
            transactions.append({
                "id": f"salary_{offset}",
                "type": "INCOME",
                "amount": 3000.0,
                "category": "Salary",
                "date": day.isoformat(),
            })
    return transactions


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/transactions")
def get_transactions(since: Optional[str] = None):
    try:
        since_date = date.fromisoformat(since) if since else None
    except ValueError:
        raise HTTPException(status_code=400, detail="since must be YYYY-MM-DD")
    transactions = generate_transactions(date.today())
    if since_date:
        transactions = [t for t in transactions if date.fromisoformat(t["date"]) >= since_date]
    return {"transactions": transactions}


@app.post("/models/{model}:generateContent")
def generate_content(model: str, body: dict):
    if not body.get("contents"):
        raise HTTPException(status_code=400, detail="contents is required")
    text = "Here is your forecast:\n```json\n" + json.dumps(CANNED_FORECAST, indent=2) + "\n```"
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}
