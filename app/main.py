# app/main.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

REJECTION_MESSAGE = "This worker only runs on a schedule."
REJECTION_STATUS = 400

app = FastAPI(title="Auto Invoice Worker")


# ---------------------------------------------------------
# Invoices are only issued by the scheduled `auto-invoice run`.
# Anything arriving over HTTP gets the same fixed answer and never
# reaches the counter or the mailer.
# ---------------------------------------------------------
@app.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
)
def reject_direct_invocation(path: str):
    return PlainTextResponse(REJECTION_MESSAGE, status_code=REJECTION_STATUS)
