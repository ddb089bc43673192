import json

import pytest

from gitsum.llm.llm_adapter import Summarizer
from gitsum.llm.models import ChatRequest, SummaryKind
from gitsum.repository.models import File, Folder, RepositoryContent
from gitsum.tokens import TokenGate

PROMPT_PREFIXES = {
    "Thoroughly summarize this code file": SummaryKind.FILE,
    "Thoroughly summarize this folder": SummaryKind.FOLDER,
    "Thoroughly summarize this github repository": SummaryKind.REPOSITORY,
}


class WordCounter:
    """One token per whitespace-separated word."""

    def count(self, text: str) -> int:
        return len(text.split())


class StubClient:
    """Completion client answering from a script instead of the network."""

    def __init__(self, respond=None, api_key: str = "test-key", model: str = "stub-model"):
        self.api_key = api_key
        self.model = model
        self.requests: list[ChatRequest] = []
        self.respond = respond or self.numbered

    def numbered(self, chat_request: ChatRequest) -> str:
        return json.dumps({"summary": f"summary-{len(self.requests)}"})

    @property
    def prompts(self) -> list[str]:
        return [r.messages[0].content for r in self.requests]

    @property
    def kinds(self) -> list[SummaryKind]:
        return [kind_of(p) for p in self.prompts]

    async def request(self, chat_request: ChatRequest) -> str:
        self.requests.append(chat_request)
        return self.respond(chat_request)


def kind_of(prompt: str) -> SummaryKind:
    for prefix, kind in PROMPT_PREFIXES.items():
        if prompt.startswith(prefix):
            return kind
    raise AssertionError(f"Unknown prompt: {prompt[:60]}")


def make_content(tree: dict) -> RepositoryContent:
    """Build content from {folder: {file: text}}."""
    content = RepositoryContent()
    for folder_name, files in tree.items():
        folder = Folder(name=folder_name)
        for file_name, text in files.items():
            folder.add_file(File(name=file_name, content=text, source_url=f"https://example.test/{file_name}"))
        content.add_folder(folder)
    return content


def words(n: int) -> str:
    return " ".join(["tok"] * n)


@pytest.fixture
def token_gate():
    return TokenGate(WordCounter())


@pytest.fixture
def stub_client():
    return StubClient()


@pytest.fixture
def summarizer(stub_client):
    return Summarizer(stub_client)
