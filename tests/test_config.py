"""
Test settings loading from the environment.
"""
import os
import sys
import warnings

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ledger_mcp.config import Settings


def test_settings_read_environment():
    keys = ("ACTUAL_BUDGET_SYNC_ID", "LEDGER_TIMEOUT_SECONDS", "SOME_UNRELATED_SETTING")
    saved = {key: os.environ.get(key) for key in keys}
    os.environ["ACTUAL_BUDGET_SYNC_ID"] = "budget-from-env"
    os.environ["LEDGER_TIMEOUT_SECONDS"] = "5"
    os.environ["SOME_UNRELATED_SETTING"] = "ignored"
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            config = Settings()
    finally:
        for key, value in saved.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value

    assert config.actual_budget_sync_id == "budget-from-env"
    assert config.ledger_timeout_seconds == 5.0
    assert not hasattr(config, "some_unrelated_setting")
    print("✓ Settings come from the environment, unknown keys ignored")


if __name__ == "__main__":
    test_settings_read_environment()
    print("All config tests passed.")
