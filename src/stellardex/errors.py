"""Error taxonomy shared by the backend and the client workflow.

Every error carries a machine-readable ``kind`` so callers can branch on it
instead of matching message substrings. The HTTP layer serializes errors with
``to_dict()`` and the client rebuilds them with ``error_from_payload()``.
"""

from typing import Any, Optional


class StellarDexError(Exception):
    """Base class for all application errors."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "kind": self.kind}


class ValidationError(StellarDexError):
    """A required field is missing or malformed. Raised before any remote call."""

    kind = "validation_error"


class InvalidAsset(ValidationError):
    """Asset code or issuer is unusable for the requested operation."""

    kind = "invalid_asset"


class AccountNotFound(StellarDexError):
    """The source account does not exist on the network."""

    kind = "account_not_found"


class RemoteUnavailable(StellarDexError):
    """Horizon (or the faucet) could not be reached."""

    kind = "remote_unavailable"


class HorizonRequestError(StellarDexError):
    """Horizon answered with an error status.

    Attributes:
        status: HTTP status returned by Horizon
        title: Problem title from the Horizon error document
        extras: Raw ``extras`` object, preserved verbatim
    """

    kind = "horizon_error"

    def __init__(
        self,
        message: str,
        status: int = 0,
        title: Optional[str] = None,
        extras: Optional[dict] = None,
    ):
        super().__init__(message)
        self.status = status
        self.title = title
        self.extras = extras

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.extras is not None:
            data["extras"] = self.extras
        return data


class NoPathFound(StellarDexError):
    """Path search succeeded but returned no candidate paths."""

    kind = "no_path_found"


class PathSearchError(StellarDexError):
    """The path search request itself failed."""

    kind = "path_search_error"


class SubmissionRejected(StellarDexError):
    """The network refused a signed transaction.

    ``result_codes`` holds the transaction and per-operation result codes so
    callers can tell ``op_underfunded`` from ``op_no_trust`` from ``tx_bad_seq``.
    """

    kind = "submission_rejected"

    def __init__(
        self,
        message: str,
        result_codes: Optional[dict] = None,
        extras: Optional[dict] = None,
    ):
        super().__init__(message)
        self.result_codes = result_codes or {}
        self.extras = extras

    @property
    def transaction_code(self) -> Optional[str]:
        return self.result_codes.get("transaction")

    @property
    def operation_codes(self) -> list[str]:
        return list(self.result_codes.get("operations") or [])

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["extras"] = self.extras
        return data


class SignerRejected(StellarDexError):
    """The external signer declined to sign or is not available."""

    kind = "signer_rejected"


class WriteInProgress(StellarDexError):
    """Another write operation is still running in this session."""

    kind = "write_in_progress"


class DuplicateSubmission(StellarDexError):
    """A signed envelope was offered for submission a second time."""

    kind = "duplicate_submission"


ERROR_KINDS: dict[str, type[StellarDexError]] = {
    cls.kind: cls
    for cls in (
        StellarDexError,
        ValidationError,
        InvalidAsset,
        AccountNotFound,
        RemoteUnavailable,
        HorizonRequestError,
        NoPathFound,
        PathSearchError,
        SubmissionRejected,
        SignerRejected,
        WriteInProgress,
        DuplicateSubmission,
    )
}


def error_from_payload(payload: Any) -> StellarDexError:
    """Rebuild a typed error from an ``{error, kind, extras}`` response body."""
    if not isinstance(payload, dict):
        return StellarDexError("Request failed")
    message = payload.get("error") or "Request failed"
    cls = ERROR_KINDS.get(payload.get("kind", ""), StellarDexError)
    extras = payload.get("extras")

    if cls is SubmissionRejected:
        result_codes = (extras or {}).get("result_codes")
        return SubmissionRejected(message, result_codes=result_codes, extras=extras)
    if cls is HorizonRequestError:
        return HorizonRequestError(message, extras=extras)
    return cls(message)
