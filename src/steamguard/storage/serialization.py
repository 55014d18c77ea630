"""
Encoding of credential records in the ``.maFile`` JSON layout.
"""

from __future__ import annotations

import orjson
from pydantic import ValidationError

from ..core.errors import CredentialStoreError
from ..models.account import CredentialRecord


def serialize_account(record: CredentialRecord) -> bytes:
    """Dump ``record`` with maFile field names; unset secrets are omitted."""
    data = record.model_dump(mode="json", by_alias=True, exclude_none=True)
    return orjson.dumps(data, option=orjson.OPT_INDENT_2)


def deserialize_account(data: bytes | str) -> CredentialRecord:
    try:
        raw = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise CredentialStoreError("credential record is not valid JSON", cause=exc) from exc
    if not isinstance(raw, dict):
        raise CredentialStoreError("credential record must be a JSON object")
    try:
        return CredentialRecord.model_validate(raw)
    except ValidationError as exc:
        raise CredentialStoreError(
            f"credential record has invalid fields: {exc.error_count()} error(s)",
            cause=exc,
        ) from exc
