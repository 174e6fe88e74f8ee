"""
Shared fixtures and step definitions for BDD tests.

- runner, context, storage_file, invoke: available to all scenario files in this directory
- no_logging: autouse, prevents log file creation during tests
- search, delete and output steps: shared across all feature files
"""

import json

import pytest
from unittest.mock import patch
from click.testing import CliRunner
from pytest_bdd import given, when, then, parsers

from nanoexpo.cli.main import cli
from nanoexpo.db.storage import LocalStorage
from nanoexpo.models import Aggregate

KEY = "nano_exhibition_manager_v1"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def context():
    """Mutable dict shared between Given/When/Then steps within a scenario."""
    return {}


@pytest.fixture
def storage_file(tmp_path):
    return tmp_path / "local_storage.json"


@pytest.fixture
def invoke(runner, storage_file):
    """Run the CLI against this scenario's storage file."""
    def _invoke(args, input=None):
        return runner.invoke(cli, ["--storage", str(storage_file)] + args, input=input)
    return _invoke


@pytest.fixture
def saved(storage_file):
    """Read back the aggregate the CLI last persisted."""
    def _saved():
        return Aggregate.from_dict(json.loads(LocalStorage(storage_file).get_item(KEY)))
    return _saved


@pytest.fixture(autouse=True)
def no_logging():
    with patch("nanoexpo.cli.main.configure_logging"):
        yield


@given("the sample data set")
def sample_data_set(storage_file):
    assert LocalStorage(storage_file).get_item(KEY) is None


@when(parsers.parse('the organiser searches {collection} for "{query}"'))
def search_collection(invoke, context, collection, query):
    context["result"] = invoke([collection, "list", "--search", query])


@when(parsers.re(
    r'the organiser deletes (?P<singular>\w+) "(?P<record_id>[^"]+)" '
    r'(?P<how>and confirms|and declines|without a prompt)'
))
def delete_record(invoke, context, singular, record_id, how):
    args = [f"{singular}s", "delete", record_id]
    if how == "without a prompt":
        context["result"] = invoke(args + ["--yes"])
    else:
        context["result"] = invoke(args, input="y\n" if how == "and confirms" else "n\n")


@then(parsers.parse('the output contains "{text}"'))
def output_contains(context, text):
    assert text in context["result"].output, (
        f"Expected {text!r} in output:\n{context['result'].output}"
    )


@then(parsers.parse('the output does not contain "{text}"'))
def output_lacks(context, text):
    assert text not in context["result"].output, (
        f"Did not expect {text!r} in output:\n{context['result'].output}"
    )
