import pandas as pd
import pytest

from pollmerge.exceptions import SchemaError, TableStructureError
from pollmerge.processors.key_normalizer import normalize_address_table, normalize_polling_table
from pollmerge.processors import ProcessingContext
from pollmerge.processors.linker import LinkageProcessor, link_tables


@pytest.fixture
def linked(address_df, polling_df):
    return link_tables(normalize_address_table(address_df), normalize_polling_table(polling_df))


def test_mixed_format_rows_join(linked):
    row = linked.merged[linked.merged["Key"] == "MAS 074"].iloc[0]

    assert row["Precinct.ID"] == "006-074"
    assert row["Polling.ID"] == "MAS-74"


def test_merged_column_order(linked):
    assert list(linked.merged.columns) == [
        "Key",
        "Polling.ID",
        "Polling.State",
        "Polling.Name",
        "Precinct.ID",
        "State",
        "Street",
    ]


def test_join_cardinality_is_product_of_side_counts():
    address = pd.DataFrame({"Key": ["A 001", "A 001", "A 001", "B 002"], "Street": ["s1", "s2", "s3", "s4"]})
    polling = pd.DataFrame({"Key": ["A 001", "A 001", "B 002"], "Polling.Name": ["p1", "p2", "p3"]})

    result = link_tables(address, polling)

    counts = result.merged["Key"].value_counts().to_dict()
    assert counts == {"A 001": 6, "B 002": 1}
    assert result.duplicate_polling_keys == {"A 001": 2}
    assert result.duplicate_address_keys == {"A 001": 3}
    # Every combination appears exactly once
    pairs = set(zip(result.merged["Street"], result.merged["Polling.Name"]))
    assert len(pairs) == len(result.merged)


def test_discrepancy_sets(linked):
    assert linked.unmatched_address_keys == ["MA 003"]
    assert linked.unmatched_polling_keys == ["MAS 003", "WI 007"]
    assert linked.has_discrepancies


def test_discrepancy_sets_are_complements(address_df, polling_df):
    address = normalize_address_table(address_df)
    polling = normalize_polling_table(polling_df)
    result = link_tables(address, polling)

    merged_keys = set(result.merged["Key"])
    address_keys = set(address["Key"].dropna())
    polling_keys = set(polling["Key"].dropna())

    assert set(result.unmatched_address_keys) == address_keys - merged_keys
    assert set(result.unmatched_polling_keys) == polling_keys - merged_keys
    assert merged_keys == address_keys & polling_keys


def test_two_and_three_letter_state_tokens_do_not_join(linked):
    # "MA 003" on the address side and "MAS 003" on the polling side
    assert "MA 003" not in linked.merged_keys
    assert "MAS 003" not in linked.merged_keys


def test_unkeyed_rows_are_excluded_and_counted():
    address = pd.DataFrame({"Key": ["A 001", None], "Street": ["s1", "s2"]})
    polling = pd.DataFrame({"Key": ["A 001", None], "Polling.Name": ["p1", "p2"]})

    result = link_tables(address, polling)

    assert len(result.merged) == 1
    assert result.unkeyed_address_rows == 1
    assert result.unkeyed_polling_rows == 1
    assert not result.has_discrepancies


def test_no_matches_is_not_an_error():
    address = pd.DataFrame({"Key": ["A 001"], "Street": ["s1"]})
    polling = pd.DataFrame({"Key": ["B 002"], "Polling.Name": ["p1"]})

    result = link_tables(address, polling)

    assert result.merged.empty
    assert result.unmatched_address_keys == ["A 001"]
    assert result.unmatched_polling_keys == ["B 002"]


def test_discrepancy_frame(linked):
    frame = linked.discrepancy_frame()

    assert list(frame.columns) == ["side", "key", "severity", "rows"]
    assert frame.iloc[0].to_dict() == {"side": "address", "key": "MA 003", "severity": "high", "rows": 1}
    assert list(frame[frame["side"] == "polling"]["key"]) == ["MAS 003", "WI 007"]
    assert set(frame[frame["side"] == "polling"]["severity"]) == {"low"}


def test_missing_key_column_raises(address_df, polling_df):
    with pytest.raises(SchemaError):
        link_tables(address_df, normalize_polling_table(polling_df))


def test_shared_columns_raise():
    address = pd.DataFrame({"Key": ["A 001"], "State": ["A"]})
    polling = pd.DataFrame({"Key": ["A 001"], "State": ["A"]})

    with pytest.raises(TableStructureError):
        link_tables(address, polling)


def test_match_rate_counts_address_rows_not_merged_rows(fixture_config):
    address = pd.DataFrame({"Key": ["A 001", "B 002"], "Street": ["s1", "s2"]})
    polling = pd.DataFrame({"Key": ["A 001", "A 001"], "Polling.Name": ["p1", "p2"]})
    context = ProcessingContext(config=fixture_config)
    context.normalized_address = address
    context.normalized_polling = polling
    context.stats.address_rows = len(address)

    LinkageProcessor(context).run()

    assert context.linkage.unmatched_address_keys == ["B 002"]
    assert context.stats.merged_rows == 2
    assert context.stats.matched_address_rows == 1
    assert context.stats.match_rate == 50.0
