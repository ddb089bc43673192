"""Bottom-up summarization of a loaded repository: files, then folders, then the repository.

Every file is checked against the token budget. Oversized files are skipped
during folder and repository runs; everything else is summarized and the
summaries of one level become the context of the next. Any failure of a
summarization call aborts the whole run.
"""

from typing import Callable, Optional

from pydantic import BaseModel, Field

from .errors import ConfigurationError, EmptyRepositoryError, TokenBudgetExceeded
from .llm.llm_adapter import Summarizer
from .llm.models import SummaryKind
from .repository.models import File, Folder, RepositoryContent
from .tokens import DEFAULT_TOKEN_LIMIT, TokenGate
from .utils import get_logger

logger = get_logger(__name__)

SummaryCallback = Callable[[SummaryKind, str, str], None]

CONTEXT_SEPARATOR = " "


class FileReport(BaseModel):
    name: str
    token_count: int
    summary: Optional[str] = None
    skipped: bool = Field(default=False, description="True when the file exceeded the token limit")


class FolderReport(BaseModel):
    name: str
    summary: str
    files: list[FileReport] = Field(default_factory=list)


class RepositoryReport(BaseModel):
    owner: str
    repo: str
    branch: str = ""
    summary: str
    folders: list[FolderReport] = Field(default_factory=list)


class RepositorySummarizer:
    """Drives file, folder and repository summarization over a RepositoryContent."""

    def __init__(
        self,
        content: RepositoryContent,
        summarizer: Summarizer,
        owner: str,
        repo: str,
        branch: str = "",
        token_gate: Optional[TokenGate] = None,
        max_tokens: int = DEFAULT_TOKEN_LIMIT,
        on_summary: Optional[SummaryCallback] = None,
    ):
        """
        Args:
            content: Loaded repository content. Only read, never modified.
            summarizer: Adapter issuing one completion request per summary.
            owner: Repository owner.
            repo: Repository name.
            branch: Branch the content was loaded from, reported only.
            token_gate: Gate deciding which files fit into a prompt.
            max_tokens: Token limit applied to each file's content.
            on_summary: Called with (kind, name, summary) right after each summary is produced.
        """
        self.content = content
        self.summarizer = summarizer
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.token_gate = token_gate or TokenGate()
        self.max_tokens = max_tokens
        self.on_summary = on_summary

    def _validate(self) -> None:
        if not self.owner:
            raise ConfigurationError("No username provided")
        if not self.repo:
            raise ConfigurationError("No repo name provided")
        if not self.summarizer.api_key:
            raise ConfigurationError("No OpenAI key provided")

    def _report(self, kind: SummaryKind, name: str, summary: str) -> None:
        logger.info(f"Summarized {kind.value} {name}")
        if self.on_summary is not None:
            self.on_summary(kind, name, summary)

    async def _summarize_file(self, file: File, token_count: int) -> FileReport:
        result = await self.summarizer.summarize(SummaryKind.FILE, file.content)
        self._report(SummaryKind.FILE, file.name, result.summary)
        return FileReport(name=file.name, token_count=token_count, summary=result.summary)

    async def _summarize_files(self, folder: Folder) -> list[FileReport]:
        reports: list[FileReport] = []
        for file in folder.files.values():
            try:
                token_count = self.token_gate.ensure_eligible(file.name, file.content, self.max_tokens)
            except TokenBudgetExceeded as e:
                logger.warning("Skipping %s: too large (%s tokens, limit %s)", e.name, e.token_count, e.limit)
                reports.append(FileReport(name=file.name, token_count=e.token_count, skipped=True))
                continue
            reports.append(await self._summarize_file(file, token_count))
        return reports

    async def _summarize_folder(self, folder: Folder) -> FolderReport:
        files = await self._summarize_files(folder)
        context = CONTEXT_SEPARATOR.join(f.summary for f in files if not f.skipped)
        result = await self.summarizer.summarize(SummaryKind.FOLDER, context)
        self._report(SummaryKind.FOLDER, folder.name, result.summary)
        return FolderReport(name=folder.name, summary=result.summary, files=files)

    async def summarize_file(self, folder_name: str, file_name: str) -> FileReport:
        """Summarize a single file.

        Raises:
            EmptyRepositoryError: If no folders were loaded.
            NotFoundError: If the folder or file does not exist.
            TokenBudgetExceeded: If the file does not fit the token limit.
        """
        self._validate()
        file = self.content.get_folder(folder_name).get(file_name)
        token_count = self.token_gate.ensure_eligible(file.name, file.content, self.max_tokens)
        return await self._summarize_file(file, token_count)

    async def summarize_folder(self, folder_name: str) -> FolderReport:
        """Summarize every eligible file of one folder, then the folder itself."""
        self._validate()
        folder = self.content.get_folder(folder_name)
        return await self._summarize_folder(folder)

    async def summarize_repository(self) -> RepositoryReport:
        """Summarize all folders in discovery order, then the whole repository."""
        self._validate()
        if not self.content.folders:
            raise EmptyRepositoryError()

        folders: list[FolderReport] = []
        # The leading empty element is part of the repository context.
        summaries = [""]
        for folder in self.content.folders.values():
            report = await self._summarize_folder(folder)
            folders.append(report)
            summaries.append(report.summary)

        result = await self.summarizer.summarize(SummaryKind.REPOSITORY, CONTEXT_SEPARATOR.join(summaries))
        self._report(SummaryKind.REPOSITORY, f"{self.owner}/{self.repo}", result.summary)
        return RepositoryReport(
            owner=self.owner,
            repo=self.repo,
            branch=self.branch,
            summary=result.summary,
            folders=folders,
        )


__all__ = [
    "FileReport",
    "FolderReport",
    "RepositoryReport",
    "RepositorySummarizer",
    "SummaryCallback",
]
