import pandas as pd
import pytest

from pollmerge.exceptions import SchemaError
from pollmerge.models import is_canonical_key, make_key
from pollmerge.processors.key_normalizer import (
    address_key,
    extract_precinct_number,
    normalize_address_table,
    normalize_polling_table,
    polling_key,
    recover_leading_zero,
)


def test_recover_leading_zero():
    assert recover_leading_zero("WIS--07") == "WIS-007"
    assert recover_leading_zero("NEWJ--12") == "NEWJ-012"
    assert recover_leading_zero("MAS-070") == "MAS-070"


@pytest.mark.parametrize(
    "raw_id, expected",
    [
        ("NEWJ-012", "012"),
        ("MAS-74", "074"),
        ("WI-7", "007"),
        ("X12-345", "345"),
        ("NOPE", None),
    ],
)
def test_extract_precinct_number(raw_id, expected):
    assert extract_precinct_number(raw_id) == expected


def test_address_key_uses_trailing_group():
    assert address_key("006-074", "MAS") == "MAS 074"


def test_address_key_ignores_state_code_group():
    # Same state issued under two numeric codes
    assert address_key("006-074", "MA") == address_key("026-074", "MA") == "MA 074"


def test_address_key_pads_short_group():
    assert address_key("006-74", "MA") == "MA 074"


@pytest.mark.parametrize("precinct", ["", "006-", "6-1234", None])
def test_address_key_malformed_identifier(precinct):
    assert address_key(precinct, "MA") is None


def test_polling_key_recovers_dash_zero():
    assert polling_key("WIS--07", "WI") == "WI 007"


def test_polling_key_newj():
    assert polling_key("NEWJ--12", "NEWJ") == "NEWJ 012"


def test_polling_key_zero_pads():
    assert polling_key("MAS-74", "MAS") == "MAS 074"


def test_polling_key_is_idempotent_on_canonical_keys():
    key = polling_key("WIS--07", "WI")
    assert polling_key(key, "WI") == key


def test_missing_state_gives_no_key():
    assert polling_key("MAS-74", "") is None
    assert address_key("006-074", None) is None


def test_state_tokens_are_not_reconciled():
    # Two- and three-letter tokens for the same state stay distinct
    assert address_key("006-074", "MA") != polling_key("MAS-074", "MAS")


def test_make_key_rejects_whitespace_in_token():
    assert make_key("NEW J", "012") is None


def test_keys_have_canonical_shape():
    keys = [
        address_key("006-074", "MAS"),
        polling_key("WIS--07", "WI"),
        polling_key("MAS-74", "MAS"),
        polling_key("NEWJ--12", "NEWJ"),
    ]
    assert all(is_canonical_key(k) for k in keys)


def test_normalize_address_table_adds_key(address_df):
    out = normalize_address_table(address_df)

    assert list(out["Key"]) == ["MAS 074", "MAS 074", "NEWJ 012", "MA 003"]
    assert "Key" not in address_df.columns


def test_normalize_polling_table_adds_key(polling_df):
    out = normalize_polling_table(polling_df)

    assert list(out["Key"]) == ["MAS 074", "NEWJ 012", "WI 007", "MAS 003"]


def test_unkeyed_rows_are_kept_with_empty_key():
    df = pd.DataFrame({"Polling.ID": ["MAS-74", "TBD"], "Polling.State": ["MAS", "MAS"]})

    out = normalize_polling_table(df)

    assert out.loc[0, "Key"] == "MAS 074"
    assert pd.isna(out.loc[1, "Key"])


def test_missing_column_raises_schema_error(address_df):
    with pytest.raises(SchemaError) as exc_info:
        normalize_address_table(address_df.drop(columns=["State"]))

    assert exc_info.value.details["missing_columns"] == ["State"]
