"""Load a repository and summarize it in the requested mode."""

from typing import Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError
from .llm.llm_adapter import ChatCompletionClient, CompletionClient, Summarizer
from .llm.models import SamplingConfig
from .repository.loader import GitHubContentLoader
from .summarizer import FileReport, FolderReport, RepositoryReport, RepositorySummarizer, SummaryCallback
from .tokens import TiktokenCounter, TokenGate
from .utils import DEFAULT_CONFIG, get_logger, load_config, resolve_credentials

logger = get_logger(__name__)

Report = Union[FileReport, FolderReport, RepositoryReport]


class SummaryOptions(BaseModel):
    """What to summarize and with which settings. Unset values come from config.yml."""
    owner: str
    repo: str
    branch: str = "main"
    folder: Optional[str] = None
    file: Optional[str] = None
    git_key: Optional[str] = None
    open_ai_key: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None

    def overrides(self) -> dict:
        """Config values given explicitly by the caller."""
        fields = ("max_tokens", "temperature", "top_p", "presence_penalty", "frequency_penalty")
        return {name: getattr(self, name) for name in fields if getattr(self, name) is not None}


async def run_pipeline(
    options: SummaryOptions,
    config: Optional[dict] = None,
    loader: Optional[GitHubContentLoader] = None,
    client: Optional[CompletionClient] = None,
    token_gate: Optional[TokenGate] = None,
    on_summary: Optional[SummaryCallback] = None,
) -> Report:
    """Execute load + summarization for one request.

    A file requires a folder. With a file the result is a FileReport, with only
    a folder a FolderReport, otherwise a RepositoryReport.
    """
    if options.file and not options.folder:
        raise ConfigurationError("You must specify a folder to summarize a file")
    if not options.owner:
        raise ConfigurationError("No username provided")
    if not options.repo:
        raise ConfigurationError("No repo name provided")

    config = {**DEFAULT_CONFIG, **(config if config is not None else load_config()), **options.overrides()}

    if loader is None or client is None:
        git_key, open_ai_key = resolve_credentials(options.git_key, options.open_ai_key)
        if loader is None:
            loader = GitHubContentLoader(git_key, api_base=config["github_api_base"], timeout=config["timeout"])
        if client is None:
            client = ChatCompletionClient(
                open_ai_key, api_base=config["api_base"], model=config["model"], timeout=config["timeout"]
            )
    if not client.api_key:
        raise ConfigurationError("No OpenAI key provided")
    try:
        sampling = SamplingConfig.from_config(config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid sampling configuration: {e}") from e

    content = await loader.load(options.owner, options.repo, options.branch)

    aggregator = RepositorySummarizer(
        content,
        Summarizer(client, sampling),
        owner=options.owner,
        repo=options.repo,
        branch=options.branch,
        token_gate=token_gate or TokenGate(TiktokenCounter(config["model"])),
        max_tokens=config["max_tokens"],
        on_summary=on_summary,
    )

    target = "/".join(p for p in (options.folder, options.file) if p) or "repository"
    logger.info(f"Summarizing {target} of {options.owner}/{options.repo}@{options.branch}")

    if options.file:
        return await aggregator.summarize_file(options.folder, options.file)
    if options.folder:
        return await aggregator.summarize_folder(options.folder)
    return await aggregator.summarize_repository()


__all__ = ["Report", "SummaryOptions", "run_pipeline"]
