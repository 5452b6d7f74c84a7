"""
Argument validation shared by the AITable tools.

Every check raises ToolInputError before any request reaches the API. The
limits mirror the ones documented by AITable.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from .exceptions import ToolInputError

MAX_RECORDS_PER_REQUEST = 10
MAX_FIELDS_PER_DATASHEET = 200
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def require_id(value: Any, what: str) -> str:
    """Path identifiers must be non-empty strings."""
    if _is_blank(value):
        raise ToolInputError(f"{what} is required and cannot be empty")
    return value


def check_batch_size(items: Optional[Sequence[Any]], noun: str = "record") -> None:
    count = len(items or [])
    if count == 0:
        raise ToolInputError(f"At least 1 {noun} is required")
    if count > MAX_RECORDS_PER_REQUEST:
        raise ToolInputError(
            f"Maximum {MAX_RECORDS_PER_REQUEST} {noun}s allowed per request, got {count}"
        )


def is_attachment_list(value: Any) -> bool:
    """Guess whether a field value is a list of attachment references.

    AITable field values are untyped, so this is a structural heuristic: a
    non-empty list whose first element carries a ``token``. Any other list
    that happens to look like this is treated as attachments too.
    """
    if not isinstance(value, list) or not value:
        return False
    first = value[0]
    return isinstance(first, Mapping) and bool(first.get("token"))


def normalize_attachments(value: List[Any], label: str, field_name: str) -> List[Dict[str, str]]:
    """Keep only ``token`` and ``name`` of each attachment, in order."""
    attachments = []
    for att_index, att in enumerate(value):
        if not isinstance(att, Mapping):
            att = {}
        prefix = f"Record {label}, field '{field_name}', attachment {att_index}"
        if _is_blank(att.get("token")):
            raise ToolInputError(f"{prefix}: 'token' is required and must be a non-empty string")
        if _is_blank(att.get("name")):
            raise ToolInputError(f"{prefix}: 'name' is required and must be a non-empty string")
        attachments.append({"token": att["token"], "name": att["name"]})
    return attachments


def normalize_record_fields(fields: Any, label: str, empty_message: str) -> Dict[str, Any]:
    """Validate one record's field map and normalize attachment values.

    ``label`` identifies the record in messages, e.g. ``"0"`` or
    ``"0 (recXXXX)"``.
    """
    if not isinstance(fields, Mapping) or not fields:
        raise ToolInputError(empty_message)

    processed = {}
    for field_name, value in fields.items():
        if _is_blank(field_name):
            raise ToolInputError(f"Record {label} has empty field name")
        if is_attachment_list(value):
            processed[field_name] = normalize_attachments(value, label, field_name)
        else:
            processed[field_name] = value
    return processed


def prepare_create_records(records: Optional[Sequence[Any]]) -> List[Dict[str, Any]]:
    """Validate a create batch and return the request body records."""
    check_batch_size(records)

    prepared = []
    for index, record in enumerate(records):
        fields = record.get("fields") if isinstance(record, Mapping) else None
        processed = normalize_record_fields(
            fields,
            label=str(index),
            empty_message=f"Record at index {index} has no fields",
        )
        prepared.append({"fields": processed})
    return prepared


def prepare_update_records(records: Optional[Sequence[Any]]) -> List[Dict[str, Any]]:
    """Validate an update batch; each record needs a ``recordId``."""
    check_batch_size(records)

    prepared = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            record = {}
        record_id = record.get("recordId")
        if _is_blank(record_id):
            raise ToolInputError(
                f"Record at index {index}: 'recordId' is required and must be a non-empty string"
            )
        processed = normalize_record_fields(
            record.get("fields"),
            label=f"{index} ({record_id})",
            empty_message=f"Record at index {index} ({record_id}) has no fields to update",
        )
        prepared.append({"recordId": record_id, "fields": processed})
    return prepared


def check_record_ids(record_ids: Optional[Sequence[Any]]) -> List[str]:
    check_batch_size(record_ids, noun="record ID")
    for index, record_id in enumerate(record_ids):
        if _is_blank(record_id):
            raise ToolInputError(f"Record ID at index {index} is empty or invalid")
    return list(record_ids)


def check_name(value: Any, what: str, limit: int = MAX_NAME_LENGTH) -> str:
    """Names are required, non-blank and at most ``limit`` characters."""
    if _is_blank(value):
        raise ToolInputError(f"{what} is required and cannot be empty")
    if len(value) > limit:
        raise ToolInputError(
            f"{what} exceeds maximum length of {limit} characters (got {len(value)})"
        )
    return value


def check_description(value: Optional[str]) -> Optional[str]:
    if value and len(value) > MAX_DESCRIPTION_LENGTH:
        raise ToolInputError(
            f"Description exceeds maximum length of {MAX_DESCRIPTION_LENGTH} characters "
            f"(got {len(value)})"
        )
    return value


def check_field_specs(fields: Optional[Sequence[Any]]) -> Optional[List[Dict[str, Any]]]:
    """Validate the field list of a new datasheet.

    Accepts pydantic models or plain mappings and returns plain dicts ready
    to be sent.
    """
    if fields is None:
        return None
    if len(fields) > MAX_FIELDS_PER_DATASHEET:
        raise ToolInputError(
            f"Maximum {MAX_FIELDS_PER_DATASHEET} fields allowed per datasheet, got {len(fields)}"
        )

    prepared = []
    for index, field in enumerate(fields):
        if isinstance(field, BaseModel):
            field = field.model_dump(exclude_none=True)
        elif not isinstance(field, Mapping):
            field = {}
        name = field.get("name")
        if _is_blank(name):
            raise ToolInputError(f"Field at index {index}: name is required and cannot be empty")
        if len(name) > MAX_NAME_LENGTH:
            raise ToolInputError(
                f"Field at index {index}: name exceeds maximum length of {MAX_NAME_LENGTH} "
                f"characters (got {len(name)})"
            )
        if _is_blank(field.get("type")):
            raise ToolInputError(f"Field at index {index} ({name}): type is required and cannot be empty")
        prepared.append(dict(field))
    return prepared
