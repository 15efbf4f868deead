import csv

import pytest

from pollmerge.exceptions import InputLoadError, PollMergeError, TableStructureError
from pollmerge.models import is_canonical_key
from pollmerge.pipeline import run_pipeline
from pollmerge.processors import ProcessingContext, RowRepairProcessor, TableBuilderProcessor


def read_csv_as_list(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


@pytest.mark.regression
def test_pipeline_end_to_end(fixture_config):
    result = run_pipeline(fixture_config)

    stats = result.stats
    assert stats.status == "completed"
    assert stats.raw_polling_lines == 8
    assert stats.repaired_lines == 1
    assert stats.dropped_lines == 1
    assert stats.polling_rows == 6
    assert stats.address_rows == 7
    assert stats.merged_rows == 5
    assert stats.matched_address_rows == 5

    assert result.linkage.unmatched_address_keys == ["MAS 003", "NJ 000"]
    assert result.linkage.unmatched_polling_keys == ["NJ 031", "WI 021"]
    assert result.written_paths == [
        fixture_config.merged_csv,
        fixture_config.address_out_csv,
        fixture_config.polling_out_csv,
    ]


@pytest.mark.regression
def test_pipeline_output_files(fixture_config):
    run_pipeline(fixture_config)

    merged = read_csv_as_list(fixture_config.merged_csv)
    addresses = read_csv_as_list(fixture_config.address_out_csv)
    polling = read_csv_as_list(fixture_config.polling_out_csv)

    assert len(merged) == 5
    assert list(merged[0].keys())[:3] == ["Key", "Polling.ID", "Polling.Name"]
    assert [r["Key"] for r in merged] == ["MA 074", "MA 074", "MA 070", "NJ 012", "WI 007"]

    # Address output keeps every row, keyed
    assert len(addresses) == 7
    assert all(is_canonical_key(r["Key"]) for r in addresses)

    # Polling output carries split State/ZIP columns and the recovered keys
    assert "Polling.State" in polling[0] and "Polling.ZIP" in polling[0]
    by_id = {r["Polling.ID"]: r for r in polling}
    assert by_id["WIS--07"]["Key"] == "WI 007"
    assert by_id["NEWJ--12"]["Key"] == "NJ 012"
    assert by_id["MAS-74"]["Polling.ZIP"] == "02116"
    assert by_id["MAS-070"]["Polling.Name"] == "City Hall Room 1"
    assert "NEWJ-000" not in by_id


def test_pipeline_writes_discrepancy_report_when_configured(fixture_config, tmp_path):
    fixture_config.discrepancy_csv = tmp_path / "output" / "discrepancies.csv"

    run_pipeline(fixture_config)

    rows = read_csv_as_list(fixture_config.discrepancy_csv)
    assert [(r["side"], r["key"], r["severity"]) for r in rows] == [
        ("address", "MAS 003", "high"),
        ("address", "NJ 000", "high"),
        ("polling", "NJ 031", "low"),
        ("polling", "WI 021", "low"),
    ]


def test_default_run_writes_only_three_tables(fixture_config):
    run_pipeline(fixture_config)

    assert sorted(p.name for p in fixture_config.merged_csv.parent.iterdir()) == [
        "addresses.csv",
        "merged.csv",
        "polling.csv",
    ]


def test_rerun_overwrites_outputs(fixture_config):
    run_pipeline(fixture_config)
    first = fixture_config.merged_csv.read_text(encoding="utf-8")

    run_pipeline(fixture_config)

    assert fixture_config.merged_csv.read_text(encoding="utf-8") == first


def test_missing_input_names_the_phase(fixture_config, tmp_path):
    fixture_config.address_csv = tmp_path / "missing.csv"

    with pytest.raises(InputLoadError) as exc_info:
        run_pipeline(fixture_config)

    assert exc_info.value.phase == "LoadSources"
    assert not fixture_config.merged_csv.exists()


def test_structural_error_names_phase_and_line(fixture_config):
    context = ProcessingContext(config=fixture_config)
    context.raw_polling_lines = ["ID,State", "A-001,MA"]
    RowRepairProcessor(context).run()

    # Simulate a repair result that let a misaligned row through
    context.repair.lines.append("A-002,MA,extra")
    context.repair.line_numbers.append(9)

    with pytest.raises(TableStructureError) as exc_info:
        TableBuilderProcessor(context).run()

    assert exc_info.value.phase == "TableBuilder"
    assert exc_info.value.details["line_number"] == 9
    assert context.failed_phase == "TableBuilder"
    assert context.stats.phase_timings[-1].success is False


def test_unexpected_error_is_wrapped_with_phase(fixture_config, monkeypatch):
    def broken_link(*args, **kwargs):
        raise ValueError("bad frame")

    monkeypatch.setattr("pollmerge.processors.linker.link_tables", broken_link)

    with pytest.raises(PollMergeError) as exc_info:
        run_pipeline(fixture_config)

    assert exc_info.value.phase == "Linkage"
    assert isinstance(exc_info.value.__cause__, ValueError)
    assert not fixture_config.merged_csv.exists()
