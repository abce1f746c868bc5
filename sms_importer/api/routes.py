"""FastAPI endpoints for the SMS Transaction Importer API.

This module defines the API routes for parsing raw SMS records posted as JSON, importing an
uploaded SMS backup file (as JSON or CSV), and health checks. It wires together the message
sources and the import runner.
"""

import io
from collections.abc import Callable
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from sms_importer.api.dependencies import get_runner_factory
from sms_importer.core.models import RawMessage, TransactionDraft
from sms_importer.core.utils import get_logger
from sms_importer.services.message_source import InMemoryMessageSource, MessageSource, source_from_upload
from sms_importer.workers.import_runner import ImportRunner, export_transactions_csv

router = APIRouter()
logger = get_logger("sms-importer.api")

RunnerFactory = Callable[[MessageSource], ImportRunner]


def run_import(runner: ImportRunner) -> list[TransactionDraft]:
    """Run an import and return its transactions, raising 422 when the messages cannot be read."""
    outcome: dict[str, object] = {}
    runner.read_and_parse_transactions(
        on_success=lambda transactions: outcome.update(transactions=transactions),
        on_error=lambda detail: outcome.update(error=detail),
    )
    if "error" in outcome:
        raise HTTPException(422, str(outcome["error"]))
    return outcome["transactions"]


@router.post(
    "/parse-messages",
    response_model=list[TransactionDraft],
    summary="Parse raw SMS records into transactions",
    description=(
        "Classify a list of raw SMS records and extract transactions from the Equity Bank "
        "and MTN Mobile Money notifications among them.\n\n"
        "**Request:**\n"
        "- JSON array of `{ address, body, date, _id }` records.\n\n"
        "**Response:**\n"
        "- 200 OK: The extracted transactions. Unrecognized messages are omitted."
    ),
    response_description="Extracted transactions.",
)
async def parse_messages(
    messages: list[RawMessage],
    runner_factory: RunnerFactory = Depends(get_runner_factory),
) -> list[TransactionDraft]:
    """Parse posted SMS records into transactions."""
    logger.info(f"Received {len(messages)} messages to parse")
    source = InMemoryMessageSource([m.model_dump(mode="json", by_alias=True) for m in messages])
    return run_import(runner_factory(source))


@router.post(
    "/upload-sms-backup",
    response_model=None,
    summary="Import transactions from an SMS backup file",
    description=(
        "Upload a JSON SMS backup (an array of inbox records) and extract its transactions.\n\n"
        "**Request:**\n"
        "- Content-Type: multipart/form-data\n"
        "- Form field: `file` (JSON file)\n"
        "- Query parameter: `format` (`json` or `csv`, default `json`)\n\n"
        "**Response:**\n"
        "- 200 OK: The extracted transactions as JSON, or a CSV attachment.\n"
        "- 400 Bad Request: If the file is not a JSON file.\n"
        "- 422 Unprocessable Entity: If the backup cannot be read."
    ),
    responses={
        400: {
            "description": "Only JSON files accepted.",
            "content": {"application/json": {"example": {"detail": "Only JSON files accepted"}}},
        },
        422: {"description": "SMS backup could not be read."},
    },
)
async def upload_sms_backup(
    file: UploadFile,
    output_format: Literal["json", "csv"] = Query(default="json", alias="format"),
    runner_factory: RunnerFactory = Depends(get_runner_factory),
) -> StreamingResponse | list[dict]:
    """Import transactions from an uploaded SMS backup file."""
    logger.info(f"Received backup upload: filename={file.filename}")
    if not (file.filename or "").lower().endswith(".json"):
        logger.warning(f"Rejected file (not JSON): {file.filename}")
        raise HTTPException(400, "Only JSON files accepted")
    transactions = run_import(runner_factory(source_from_upload(file)))
    if output_format == "csv":
        return StreamingResponse(
            io.BytesIO(export_transactions_csv(transactions).encode("utf-8")),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=sms_transactions.csv"},
        )
    return [t.model_dump(mode="json", by_alias=True) for t in transactions]


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
