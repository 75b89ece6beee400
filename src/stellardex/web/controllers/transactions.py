"""Submission endpoint for client-signed transactions."""

from fastapi import APIRouter, Depends

from stellardex.web.contracts.transactions import SubmitRequest
from stellardex.web.dependencies import get_submission_gateway
from stellardex.web.services.submission_gateway import SubmissionGateway

router = APIRouter(tags=["transactions"])


@router.post("/submit")
async def submit_transaction(
    request: SubmitRequest,
    gateway: SubmissionGateway = Depends(get_submission_gateway),
) -> dict:
    """Submit a signed envelope to the network once.

    On rejection the response carries ``extras.result_codes`` from the
    network unchanged. Rejected envelopes are never retried; rebuild to
    try again.
    """
    return await gateway.submit(request.signed_xdr)
