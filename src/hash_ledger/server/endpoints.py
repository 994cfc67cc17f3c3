"""Record endpoints: store and fetch document hashes.

Response bodies keep the original service's shapes. ``/store`` answers
``{"status": "OK"}`` or ``{"status": "Error"}``; ``/fetch`` always answers
``{hospitalId, reportId, documentHash}`` with an empty hash when nothing
could be read. Status codes are 200 unless strict status codes are enabled.
"""

import logging
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import ValidationError

from hash_ledger.models.requests import KeyRequest, StoreRequest
from hash_ledger.utils.exceptions import HashLedgerError, NotFoundError, http_status_for

logger = logging.getLogger(__name__)

records_bp = Blueprint("records", __name__)

# app.extensions key holding the ServerState
EXTENSION_KEY = "hash_ledger"


def _state():
    return current_app.extensions[EXTENSION_KEY]


def _request_data() -> dict[str, Any]:
    """Collect request parameters from a JSON body, a form body or the query string."""
    if request.method == "GET":
        return request.args.to_dict()
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict() or request.args.to_dict()


def _respond(body: dict[str, Any], status: int) -> tuple[Response, int]:
    if not _state().strict_status_codes:
        status = 200
    return jsonify(body), status


@records_bp.route("/store", methods=["POST"])
@records_bp.route("/addHashToBlockchain", methods=["POST"])
def store_record() -> tuple[Response, int]:
    """Store a document hash for a hospital/report pair."""
    data = _request_data()
    try:
        body = StoreRequest.model_validate(data)
    except ValidationError as e:
        logger.info(f"Rejected store request: {e.error_count()} validation error(s): {data}")
        return _respond({"status": "Error"}, 400)

    try:
        receipt = _state().store.store(body.key, body.document_hash)
    except HashLedgerError as e:
        logger.warning(f"Store of {body.key} failed: {type(e).__name__}: {e}")
        return _respond({"status": "Error"}, http_status_for(e))

    logger.info(f"Stored {body.key} in slot {receipt.slot_address} (signature={receipt.signature})")
    return _respond({"status": "OK"}, 200)


@records_bp.route("/fetch", methods=["GET", "POST"])
@records_bp.route("/getDocumentHash", methods=["POST"])
def fetch_record() -> tuple[Response, int]:
    """Return the document hash stored for a hospital/report pair."""
    data = _request_data()
    empty = {
        "hospitalId": data.get("hospitalId"),
        "reportId": data.get("reportId"),
        "documentHash": "",
    }

    try:
        body = KeyRequest.model_validate(data)
    except ValidationError as e:
        logger.info(f"Rejected fetch request: {e.error_count()} validation error(s): {data}")
        return _respond(empty, 400)

    empty["hospitalId"] = body.hospital_id
    empty["reportId"] = body.report_id
    try:
        record = _state().store.fetch(body.key)
    except NotFoundError as e:
        logger.info(str(e))
        return _respond(empty, 404)
    except HashLedgerError as e:
        logger.warning(f"Fetch of {body.key} failed: {type(e).__name__}: {e}")
        return _respond(empty, http_status_for(e))

    return _respond(record.to_response(), 200)
