import asyncio
import json

import pytest

from conftest import StubClient, kind_of, make_content, words
from gitsum.errors import (
    ConfigurationError,
    EmptyRepositoryError,
    InvalidResponseError,
    NotFoundError,
    TokenBudgetExceeded,
    TransportError,
)
from gitsum.llm.llm_adapter import Summarizer
from gitsum.llm.models import SummaryKind
from gitsum.llm.prompts import summary_prompt
from gitsum.repository.models import RepositoryContent
from gitsum.summarizer import RepositorySummarizer


def make_aggregator(content, client, token_gate, **kwargs) -> RepositorySummarizer:
    kwargs.setdefault("owner", "octo")
    kwargs.setdefault("repo", "demo")
    return RepositorySummarizer(content, Summarizer(client), token_gate=token_gate, **kwargs)


def by_kind(chat_request) -> str:
    kind = kind_of(chat_request.messages[0].content)
    return json.dumps({"summary": f"{kind.value}-summary"})


# --- Full repository ---

def test_repository_scenario_order_and_contexts(token_gate):
    content = make_content({"src": {"a.rs": words(4000)}, "docs": {}})
    answers = iter(["a.rs summary", "src summary", "docs summary", "repo summary"])
    client = StubClient(respond=lambda _: json.dumps({"summary": next(answers)}))

    report = asyncio.run(make_aggregator(content, client, token_gate).summarize_repository())

    assert client.kinds == [SummaryKind.FILE, SummaryKind.FOLDER, SummaryKind.FOLDER, SummaryKind.REPOSITORY]
    assert client.prompts[0] == summary_prompt(SummaryKind.FILE, words(4000))
    assert client.prompts[1] == summary_prompt(SummaryKind.FOLDER, "a.rs summary")
    assert client.prompts[2] == summary_prompt(SummaryKind.FOLDER, "")
    assert client.prompts[3] == summary_prompt(SummaryKind.REPOSITORY, "" + " " + "src summary" + " " + "docs summary")

    assert report.summary == "repo summary"
    assert [f.name for f in report.folders] == ["src", "docs"]
    assert report.folders[0].files[0].summary == "a.rs summary"
    assert report.folders[1].files == []


def test_oversized_file_is_skipped_and_run_continues(token_gate):
    content = make_content({"src": {"big.py": words(5000), "small.py": words(10), "other.py": words(4096)}})
    answers = iter(["small", "other", "folder", "repo"])
    client = StubClient(respond=lambda _: json.dumps({"summary": next(answers)}))

    report = asyncio.run(make_aggregator(content, client, token_gate).summarize_repository())

    assert client.kinds == [SummaryKind.FILE, SummaryKind.FILE, SummaryKind.FOLDER, SummaryKind.REPOSITORY]
    assert client.prompts[2] == summary_prompt(SummaryKind.FOLDER, "small other")
    files = {f.name: f for f in report.folders[0].files}
    assert files["big.py"].skipped
    assert files["big.py"].summary is None
    assert files["big.py"].token_count == 5000
    assert not files["other.py"].skipped


def test_folder_with_only_oversized_files_gets_empty_context(token_gate):
    content = make_content({"assets": {"dump.sql": words(9000)}})
    client = StubClient()

    asyncio.run(make_aggregator(content, client, token_gate).summarize_repository())

    assert client.kinds == [SummaryKind.FOLDER, SummaryKind.REPOSITORY]
    assert client.prompts[0] == summary_prompt(SummaryKind.FOLDER, "")


def test_custom_token_limit(token_gate):
    content = make_content({"src": {"a.py": words(20)}})
    client = StubClient()

    report = asyncio.run(make_aggregator(content, client, token_gate, max_tokens=10).summarize_repository())

    assert report.folders[0].files[0].skipped
    assert client.kinds == [SummaryKind.FOLDER, SummaryKind.REPOSITORY]


def test_repository_without_folders_fails_before_any_call(token_gate):
    client = StubClient()
    with pytest.raises(EmptyRepositoryError):
        asyncio.run(make_aggregator(RepositoryContent(), client, token_gate).summarize_repository())
    assert client.requests == []


def test_pipeline_is_idempotent(token_gate):
    content = make_content({"src": {"a.py": "x", "b.py": "y"}, "lib": {"c.py": "z"}, "empty": {}})

    def run():
        client = StubClient(respond=by_kind)
        report = asyncio.run(make_aggregator(content, client, token_gate).summarize_repository())
        return report.model_dump(), client.prompts

    first_report, first_prompts = run()
    second_report, second_prompts = run()

    assert first_report == second_report
    assert first_prompts == second_prompts
    # 3 eligible files + 3 folders + 1 repository
    assert len(first_prompts) == 7


def test_invalid_folder_response_aborts_before_repository_call(token_gate):
    content = make_content({"src": {"a.py": "x"}, "lib": {"b.py": "y"}})

    def respond(chat_request):
        if kind_of(chat_request.messages[0].content) is SummaryKind.FOLDER:
            return "not json"
        return json.dumps({"summary": "file"})

    client = StubClient(respond=respond)
    with pytest.raises(InvalidResponseError) as exc_info:
        asyncio.run(make_aggregator(content, client, token_gate).summarize_repository())

    assert exc_info.value.raw == "not json"
    assert SummaryKind.REPOSITORY not in client.kinds
    assert client.kinds == [SummaryKind.FILE, SummaryKind.FOLDER]


def test_file_failure_aborts_the_run(token_gate):
    content = make_content({"src": {"a.py": "x", "b.py": "y"}})

    def respond(chat_request):
        raise TransportError("boom", status_code=503)

    client = StubClient(respond=respond)
    with pytest.raises(TransportError):
        asyncio.run(make_aggregator(content, client, token_gate).summarize_repository())
    assert len(client.requests) == 1


def test_progress_callback_reports_bottom_up(token_gate):
    content = make_content({"src": {"a.py": "x"}})
    seen = []
    aggregator = make_aggregator(
        content, StubClient(), token_gate, on_summary=lambda kind, name, summary: seen.append((kind, name, summary))
    )

    asyncio.run(aggregator.summarize_repository())

    assert seen == [
        (SummaryKind.FILE, "a.py", "summary-1"),
        (SummaryKind.FOLDER, "src", "summary-2"),
        (SummaryKind.REPOSITORY, "octo/demo", "summary-3"),
    ]


# --- Preconditions ---

@pytest.mark.parametrize(
    "kwargs",
    [{"owner": ""}, {"repo": ""}],
)
def test_missing_identity_is_a_configuration_error(token_gate, kwargs):
    client = StubClient()
    aggregator = make_aggregator(make_content({"src": {"a.py": "x"}}), client, token_gate, **kwargs)
    with pytest.raises(ConfigurationError):
        asyncio.run(aggregator.summarize_repository())
    assert client.requests == []


def test_missing_credential_is_a_configuration_error(token_gate):
    client = StubClient(api_key="")
    aggregator = make_aggregator(make_content({"src": {"a.py": "x"}}), client, token_gate)
    for call in (
        aggregator.summarize_repository(),
        aggregator.summarize_folder("src"),
        aggregator.summarize_file("src", "a.py"),
    ):
        with pytest.raises(ConfigurationError):
            asyncio.run(call)
    assert client.requests == []


# --- Single folder ---

def test_summarize_folder(token_gate):
    content = make_content({"src": {"a.py": "x", "big.py": words(5000)}, "lib": {"b.py": "y"}})
    client = StubClient()

    report = asyncio.run(make_aggregator(content, client, token_gate).summarize_folder("src"))

    assert report.name == "src"
    assert report.summary == "summary-2"
    assert client.kinds == [SummaryKind.FILE, SummaryKind.FOLDER]
    assert client.prompts[1] == summary_prompt(SummaryKind.FOLDER, "summary-1")


def test_summarize_empty_folder_still_calls_model(token_gate):
    client = StubClient()
    asyncio.run(make_aggregator(make_content({"docs": {}}), client, token_gate).summarize_folder("docs"))
    assert client.prompts == [summary_prompt(SummaryKind.FOLDER, "")]


def test_summarize_unknown_folder(token_gate):
    client = StubClient()
    with pytest.raises(NotFoundError) as exc_info:
        asyncio.run(make_aggregator(make_content({"src": {}}), client, token_gate).summarize_folder("nope"))
    assert not isinstance(exc_info.value, EmptyRepositoryError)
    assert exc_info.value.name == "nope"
    assert client.requests == []


def test_summarize_folder_without_loaded_folders(token_gate):
    with pytest.raises(EmptyRepositoryError):
        asyncio.run(make_aggregator(RepositoryContent(), StubClient(), token_gate).summarize_folder("src"))


# --- Single file ---

def test_summarize_file(token_gate):
    content = make_content({"src": {"src/a.py": "print('a')"}})
    client = StubClient()

    report = asyncio.run(make_aggregator(content, client, token_gate).summarize_file("src", "src/a.py"))

    assert report.name == "src/a.py"
    assert report.summary == "summary-1"
    assert report.token_count == 1
    assert client.prompts == [summary_prompt(SummaryKind.FILE, "print('a')")]


def test_summarize_file_by_name_relative_to_folder(token_gate):
    content = make_content({"src": {"src/a.py": "x"}})
    report = asyncio.run(make_aggregator(content, StubClient(), token_gate).summarize_file("src", "a.py"))
    assert report.name == "src/a.py"


def test_summarize_oversized_file_is_terminal(token_gate):
    content = make_content({"src": {"oversized.rs": words(5000)}})
    client = StubClient()

    with pytest.raises(TokenBudgetExceeded) as exc_info:
        asyncio.run(make_aggregator(content, client, token_gate).summarize_file("src", "oversized.rs"))

    assert exc_info.value.token_count == 5000
    assert client.requests == []


def test_summarize_unknown_file(token_gate):
    client = StubClient()
    with pytest.raises(NotFoundError) as exc_info:
        asyncio.run(make_aggregator(make_content({"src": {"a.py": "x"}}), client, token_gate).summarize_file("src", "b.py"))
    assert exc_info.value.name == "b.py"
    assert client.requests == []


def test_summarize_file_without_loaded_folders(token_gate):
    with pytest.raises(EmptyRepositoryError):
        asyncio.run(make_aggregator(RepositoryContent(), StubClient(), token_gate).summarize_file("src", "a.py"))
