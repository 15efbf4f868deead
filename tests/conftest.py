import os
from pathlib import Path

import pandas as pd
import pytest

# Keep test runs from writing log files into the project
os.environ.setdefault("LOG_TO_FILE", "0")

from pollmerge.config import Config, reset_config  # noqa: E402

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def fixture_config(tmp_path):
    """Config reading the fixture inputs and writing into a temp directory."""
    out = tmp_path / "output"
    return Config(
        address_csv=FIXTURES / "addresses.csv",
        polling_csv=FIXTURES / "polling_locations.csv",
        corrections_file=FIXTURES / "polling_corrections.json",
        corrections_required=True,
        merged_csv=out / "merged.csv",
        address_out_csv=out / "addresses.csv",
        polling_out_csv=out / "polling.csv",
        discrepancy_csv=None,
        logs_dir=tmp_path / "logs",
        log_to_file=False,
    )


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def address_df():
    return pd.DataFrame(
        {
            "Precinct.ID": ["006-074", "006-074", "031-012", "036-003"],
            "State": ["MAS", "MAS", "NEWJ", "MA"],
            "Street": ["12 Elm St", "14 Elm St", "5 Oak Ave", "8 Harbor Way"],
        }
    )


@pytest.fixture
def polling_df():
    return pd.DataFrame(
        {
            "Polling.ID": ["MAS-74", "NEWJ--12", "WIS--07", "MAS-003"],
            "Polling.State": ["MAS", "NEWJ", "WI", "MAS"],
            "Polling.Name": ["Library", "High School", "Town Hall", "Harbor Hall"],
        }
    )
