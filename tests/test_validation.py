import pytest

from aitable_mcp.exceptions import ToolInputError
from aitable_mcp.models import FieldSpec
from aitable_mcp.validation import (
    check_batch_size,
    check_description,
    check_field_specs,
    check_name,
    check_record_ids,
    is_attachment_list,
    prepare_create_records,
    prepare_update_records,
)


def _records(count):
    return [{"fields": {"Name": f"row {i}"}} for i in range(count)]


@pytest.mark.parametrize("count", [1, 5, 10])
def test_batch_size_within_limits(count):
    check_batch_size(_records(count))


def test_batch_size_empty():
    with pytest.raises(ToolInputError, match="At least 1 record is required"):
        check_batch_size([])


@pytest.mark.parametrize("count", [11, 25])
def test_batch_size_too_large_reports_count(count):
    with pytest.raises(ToolInputError, match=f"Maximum 10 records allowed per request, got {count}"):
        check_batch_size(_records(count))


def test_attachment_values_keep_only_token_and_name_in_order():
    records = [
        {
            "fields": {
                "Files": [
                    {"token": "space/a.pdf", "name": "a.pdf", "size": 10, "mimeType": "application/pdf"},
                    {"token": "space/b.png", "name": "b.png", "url": "https://example.com/b.png"},
                ],
                "Title": "report",
            }
        }
    ]

    prepared = prepare_create_records(records)

    assert prepared == [
        {
            "fields": {
                "Files": [
                    {"token": "space/a.pdf", "name": "a.pdf"},
                    {"token": "space/b.png", "name": "b.png"},
                ],
                "Title": "report",
            }
        }
    ]


def test_non_attachment_lists_pass_through_unchanged():
    fields = {"Tags": ["a", "b"], "Links": [{"recordId": "rec1"}], "Empty": []}

    prepared = prepare_create_records([{"fields": fields}])

    assert prepared[0]["fields"] == fields


def test_list_whose_first_element_has_token_is_treated_as_attachments():
    assert is_attachment_list([{"token": "t", "name": "n"}])
    assert not is_attachment_list([{"name": "n"}])
    assert not is_attachment_list([])
    assert not is_attachment_list("token")


@pytest.mark.parametrize(
    "attachment, missing",
    [
        ({"token": "space/b.png"}, "name"),
        ({"token": "space/b.png", "name": "  "}, "name"),
        ({"token": "", "name": "b.png"}, "token"),
        ({"token": 42, "name": "b.png"}, "token"),
    ],
)
def test_invalid_attachment_names_record_and_field(attachment, missing):
    records = [
        {"fields": {"Name": "ok"}},
        {"fields": {"Files": [{"token": "space/a.pdf", "name": "a.pdf"}, attachment]}},
    ]

    with pytest.raises(ToolInputError) as exc_info:
        prepare_create_records(records)

    message = str(exc_info.value)
    assert message.startswith("Record 1, field 'Files', attachment 1")
    assert f"'{missing}' is required and must be a non-empty string" in message


def test_record_without_fields_is_rejected():
    with pytest.raises(ToolInputError, match="Record at index 1 has no fields"):
        prepare_create_records([{"fields": {"Name": "a"}}, {"fields": {}}])


def test_blank_field_name_is_rejected():
    with pytest.raises(ToolInputError, match="Record 0 has empty field name"):
        prepare_create_records([{"fields": {"   ": "value"}}])


def test_update_requires_record_id():
    with pytest.raises(ToolInputError, match="Record at index 0: 'recordId' is required"):
        prepare_update_records([{"fields": {"Name": "a"}}])


def test_update_messages_include_record_id():
    with pytest.raises(ToolInputError, match=r"Record at index 0 \(rec1\) has no fields to update"):
        prepare_update_records([{"recordId": "rec1", "fields": {}}])

    with pytest.raises(ToolInputError, match=r"Record 0 \(rec1\), field 'Files', attachment 0"):
        prepare_update_records([{"recordId": "rec1", "fields": {"Files": [{"token": "t"}]}}])


def test_update_keeps_record_ids():
    prepared = prepare_update_records([{"recordId": "rec1", "fields": {"Name": "a"}, "extra": 1}])

    assert prepared == [{"recordId": "rec1", "fields": {"Name": "a"}}]


def test_record_ids_batch_and_blank_entries():
    with pytest.raises(ToolInputError, match="At least 1 record ID is required"):
        check_record_ids([])
    with pytest.raises(ToolInputError, match="Maximum 10 record IDs allowed per request, got 11"):
        check_record_ids([f"rec{i}" for i in range(11)])
    with pytest.raises(ToolInputError, match="Record ID at index 1 is empty or invalid"):
        check_record_ids(["rec1", " "])


def test_name_length_reports_limit_and_actual_length():
    with pytest.raises(ToolInputError, match=r"Datasheet name exceeds maximum length of 100 characters \(got 101\)"):
        check_name("x" * 101, "Datasheet name")

    assert check_name("x" * 100, "Datasheet name") == "x" * 100


def test_blank_name_is_rejected():
    with pytest.raises(ToolInputError, match="Field name is required and cannot be empty"):
        check_name("  ", "Field name")


def test_description_limit():
    check_description(None)
    check_description("d" * 500)
    with pytest.raises(ToolInputError, match=r"maximum length of 500 characters \(got 501\)"):
        check_description("d" * 501)


def test_field_specs_are_validated_with_index():
    with pytest.raises(ToolInputError, match=r"Field at index 1: name exceeds maximum length of 100 characters \(got 120\)"):
        check_field_specs([FieldSpec(type="SingleText", name="ok"), FieldSpec(type="SingleText", name="n" * 120)])

    with pytest.raises(ToolInputError, match=r"Field at index 0 \(Title\): type is required"):
        check_field_specs([{"type": "", "name": "Title"}])


def test_field_specs_limit_and_conversion():
    with pytest.raises(ToolInputError, match="Maximum 200 fields allowed per datasheet, got 201"):
        check_field_specs([{"type": "SingleText", "name": f"f{i}"} for i in range(201)])

    assert check_field_specs(None) is None
    assert check_field_specs([FieldSpec(type="SingleText", name="Title")]) == [{"type": "SingleText", "name": "Title"}]
