"""
Unit tests for nanoexpo/cli/main.py.

Strategy:
  - every command runs against a real store on a tmp_path storage file,
    passed with --storage, so the sample data is the starting state
  - patch nanoexpo.cli.main.configure_logging (autouse) to prevent file I/O
  - the clipboard is patched at nanoexpo.engine.export.pyperclip.copy
  - use click.testing.CliRunner to invoke commands end-to-end
"""

import json
from unittest.mock import patch

import pyperclip
import pytest
from click.testing import CliRunner

from nanoexpo.cli.main import cli, _validate_datetime
from nanoexpo.db.storage import LocalStorage
from nanoexpo.models import Aggregate

KEY = 'nano_exhibition_manager_v1'


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging():
    """Prevent configure_logging from creating log files during tests."""
    with patch("nanoexpo.cli.main.configure_logging"):
        yield


@pytest.fixture
def storage_file(tmp_path):
    return tmp_path / "local_storage.json"


@pytest.fixture
def invoke(runner, storage_file):
    def _invoke(args, input=None):
        return runner.invoke(cli, ["--storage", str(storage_file)] + args, input=input)
    return _invoke


def saved(storage_file):
    return Aggregate.from_dict(json.loads(LocalStorage(storage_file).get_item(KEY)))


# ---------------------------------------------------------------------------
# _validate_datetime
# ---------------------------------------------------------------------------

class TestValidateDatetime:

    def test_blank_passes_through(self):
        assert _validate_datetime(None, None, "") == ""
        assert _validate_datetime(None, None, None) is None

    def test_t_form_kept(self):
        assert _validate_datetime(None, None, "2025-11-12T10:00") == "2025-11-12T10:00"

    def test_space_form_normalised(self):
        assert _validate_datetime(None, None, "2025-11-12 10:00") == "2025-11-12T10:00"

    def test_bad_format_rejected(self):
        import click
        with pytest.raises(click.BadParameter):
            _validate_datetime(None, None, "12/11/2025")


# ---------------------------------------------------------------------------
# dashboard
# ---------------------------------------------------------------------------

class TestDashboard:

    def test_counts_and_latest(self, invoke):
        result = invoke(["dashboard"])
        assert result.exit_code == 0
        assert "Exhibitors:     2" in result.output
        assert "Schedule items: 1" in result.output
        assert "Ali Reza" in result.output
        assert "NanoTech Lab • Visitor" in result.output

    def test_no_registrations(self, invoke):
        invoke(["attendees", "delete", "at-1", "--yes"])
        result = invoke(["dashboard"])
        assert "No registrations yet." in result.output


# ---------------------------------------------------------------------------
# list / show
# ---------------------------------------------------------------------------

class TestList:

    def test_lists_sample_exhibitors(self, invoke):
        result = invoke(["exhibitors", "list"])
        assert result.exit_code == 0
        assert "Found 2 exhibitors" in result.output
        assert "NanoTech Lab" in result.output
        assert "Micro Instruments" in result.output

    def test_search_filters(self, invoke):
        result = invoke(["exhibitors", "list", "--search", "micro"])
        assert "Found 1 exhibitors" in result.output
        assert "NanoTech Lab" not in result.output

    def test_no_match_message(self, invoke):
        result = invoke(["booths", "list", "-q", "zzz"])
        assert result.exit_code == 0
        assert "No booths match." in result.output

    def test_events_list(self, invoke):
        result = invoke(["events", "list"])
        assert "Opening Ceremony" in result.output
        assert "2025-11-12T10:00" in result.output

    def test_list_does_not_write_storage(self, invoke, storage_file):
        invoke(["attendees", "list"])
        assert LocalStorage(storage_file).get_item(KEY) is None


class TestShow:

    def test_shows_all_fields(self, invoke):
        result = invoke(["booths", "show", "b-A1"])
        assert result.exit_code == 0
        assert "BOOTH b-A1" in result.output
        assert "Near entrance" in result.output

    def test_not_found(self, invoke):
        result = invoke(["attendees", "show", "at-404"])
        assert result.exit_code == 0
        assert "not found" in result.output


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

class TestAdd:

    def test_add_with_options(self, invoke, storage_file):
        result = invoke(["booths", "add", "--code", "C3", "--size", "2x2", "--notes", "Back wall"])
        assert result.exit_code == 0
        assert "✓ Added booth b-" in result.output
        assert saved(storage_file).booths[-1].code == "C3"

    def test_add_interactive(self, invoke, storage_file):
        inputs = "\n".join(["Quantum Dots Inc", "hello@qd.example", "A1", "Demo every hour"]) + "\n"
        result = invoke(["exhibitors", "add"], input=inputs)
        assert result.exit_code == 0
        added = saved(storage_file).exhibitors[-1]
        assert added.name == "Quantum Dots Inc"
        assert added.notes == "Demo every hour"
        assert added.id.startswith("ex-")

    def test_add_interactive_optional_fields_skipped(self, invoke, storage_file):
        result = invoke(["booths", "add"], input="D4\n\n\n")
        assert result.exit_code == 0
        booth = saved(storage_file).booths[-1]
        assert (booth.code, booth.size, booth.notes) == ("D4", "", "")

    def test_add_blank_name_rejected(self, invoke, storage_file):
        result = invoke(["exhibitors", "add", "--name", "  ", "--contact", "", "--booth", "", "--notes", ""])
        assert "required" in result.output
        assert LocalStorage(storage_file).get_item(KEY) is None

    def test_add_attendee_type_choice(self, invoke, storage_file):
        result = invoke(["attendees", "add", "--name", "Sam", "--company", "", "--email", "",
                         "--type", "speaker"])
        assert result.exit_code == 0
        assert saved(storage_file).attendees[-1].type == "Speaker"

    def test_add_attendee_bad_type(self, invoke):
        result = invoke(["attendees", "add", "--name", "Sam", "--company", "", "--email", "",
                         "--type", "VIP"])
        assert result.exit_code != 0

    def test_add_event_reprompts_on_bad_date(self, invoke, storage_file):
        inputs = "\n".join(["Keynote", "tomorrow", "2025-11-12 11:00", "2025-11-12T12:00", "Hall B", "Dr. B"]) + "\n"
        result = invoke(["events", "add"], input=inputs)
        assert result.exit_code == 0
        event = saved(storage_file).events[-1]
        assert event.start == "2025-11-12T11:00"
        assert event.end == "2025-11-12T12:00"


# ---------------------------------------------------------------------------
# edit
# ---------------------------------------------------------------------------

class TestEdit:

    def test_edit_updates_field(self, invoke, storage_file):
        result = invoke(["booths", "edit", "b-A1", "--size", "4x4"])
        assert result.exit_code == 0
        assert "✓ Updated booth b-A1" in result.output
        booth = saved(storage_file).booths[0]
        assert (booth.size, booth.notes) == ("4x4", "Near entrance")

    def test_edit_can_blank_a_field(self, invoke, storage_file):
        invoke(["exhibitors", "edit", "ex-1", "--notes", ""])
        assert saved(storage_file).exhibitors[0].notes == ""

    def test_edit_no_options(self, invoke):
        result = invoke(["attendees", "edit", "at-1"])
        assert "No updates specified" in result.output
        assert "--company" in result.output

    def test_edit_not_found(self, invoke, storage_file):
        result = invoke(["events", "edit", "ev-404", "--title", "Ghost"])
        assert "not found" in result.output
        assert LocalStorage(storage_file).get_item(KEY) is None

    def test_edit_event_bad_date(self, invoke):
        result = invoke(["events", "edit", "ev-1", "--start", "noon"])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

class TestDelete:

    def test_delete_confirmed(self, invoke, storage_file):
        result = invoke(["exhibitors", "delete", "ex-1"], input="y\n")
        assert "Delete exhibitor?" in result.output
        assert "✓ Deleted exhibitor ex-1" in result.output
        assert [e.id for e in saved(storage_file).exhibitors] == ["ex-2"]

    def test_delete_declined(self, invoke, storage_file):
        result = invoke(["exhibitors", "delete", "ex-1"], input="n\n")
        assert "Cancelled." in result.output
        assert LocalStorage(storage_file).get_item(KEY) is None

    def test_delete_yes_skips_prompt(self, invoke, storage_file):
        result = invoke(["booths", "delete", "b-B2", "--yes"])
        assert "Delete booth?" not in result.output
        assert [b.id for b in saved(storage_file).booths] == ["b-A1"]

    def test_delete_not_found(self, invoke):
        result = invoke(["booths", "delete", "b-404"])
        assert "not found" in result.output
        assert "Delete booth?" not in result.output


# ---------------------------------------------------------------------------
# copy-json
# ---------------------------------------------------------------------------

class TestCopyJson:

    def test_copies_filtered_list(self, invoke):
        with patch("nanoexpo.engine.export.pyperclip.copy") as mock_copy:
            result = invoke(["exhibitors", "copy-json", "--search", "graphene"])
        assert "✓ Copied 1 exhibitors" in result.output
        copied = json.loads(mock_copy.call_args[0][0])
        assert [e["id"] for e in copied] == ["ex-1"]

    def test_clipboard_unavailable(self, invoke):
        with patch("nanoexpo.engine.export.pyperclip.copy",
                   side_effect=pyperclip.PyperclipException("no clipboard")):
            result = invoke(["attendees", "copy-json"])
        assert result.exit_code == 0
        assert "Clipboard unavailable" in result.output


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------

class TestExport:

    def test_csv_attendees(self, invoke, tmp_path):
        out = tmp_path / "out"
        result = invoke(["export", "csv", "attendees", "--output-dir", str(out)])
        assert result.exit_code == 0
        files = list(out.glob("export_*.csv"))
        assert len(files) == 1
        lines = files[0].read_text(encoding="utf-8").splitlines()
        assert lines == [
            '"Name","Company","Email","Type"',
            '"Ali Reza","NanoTech Lab","ali@example.com","Visitor"',
        ]

    def test_csv_unsupported_collection(self, invoke):
        result = invoke(["export", "csv", "booths"])
        assert result.exit_code != 0

    def test_copy_full_json(self, invoke):
        with patch("nanoexpo.engine.export.pyperclip.copy") as mock_copy:
            result = invoke(["export", "copy-json"])
        assert "Full data copied" in result.output
        assert set(json.loads(mock_copy.call_args[0][0])) == {"exhibitors", "booths", "events", "attendees"}


# ---------------------------------------------------------------------------
# settings
# ---------------------------------------------------------------------------

class TestSettings:

    def test_reset_confirmed(self, invoke, storage_file):
        invoke(["exhibitors", "delete", "ex-1", "--yes"])
        result = invoke(["settings", "reset"], input="y\n")
        assert "✓ Data reset to sample data" in result.output
        assert len(saved(storage_file).exhibitors) == 2

    def test_reset_declined(self, invoke, storage_file):
        invoke(["exhibitors", "delete", "ex-1", "--yes"])
        result = invoke(["settings", "reset"], input="n\n")
        assert "Cancelled." in result.output
        assert len(saved(storage_file).exhibitors) == 1

    def test_backup(self, invoke, tmp_path):
        result = invoke(["settings", "backup", "--output-dir", str(tmp_path / "bk")])
        assert result.exit_code == 0
        data = json.loads((tmp_path / "bk" / "nano_exhibition_data.json").read_text(encoding="utf-8"))
        assert data["events"][0]["title"] == "Opening Ceremony"


# ---------------------------------------------------------------------------
# Storage fallbacks
# ---------------------------------------------------------------------------

def test_corrupt_storage_falls_back_to_sample(invoke, storage_file):
    LocalStorage(storage_file).set_item(KEY, "{definitely not json")
    result = invoke(["exhibitors", "list"])
    assert result.exit_code == 0
    assert "NanoTech Lab" in result.output


def test_reset_recovers_from_deeply_nested_storage_file(invoke, storage_file):
    storage_file.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
    result = invoke(["settings", "reset", "--yes"])
    assert result.exit_code == 0
    assert "✓ Data reset to sample data" in result.output
    assert len(saved(storage_file).exhibitors) == 2
