"""Summarization prompts, one template per granularity."""

from pydantic import BaseModel, ConfigDict

from .models import SummaryKind


class PromptTemplate(BaseModel):
    """Template text plus the name of the placeholder the context replaces."""
    model_config = ConfigDict(frozen=True)

    template: str
    variable: str

    @property
    def placeholder(self) -> str:
        return "{{" + self.variable + "}}"

    def render(self, context: str) -> str:
        return self.template.replace(self.placeholder, context)


_ANSWER_FORMAT = """Return a JSON object for your answer.
Make sure your entire answer is in the JSON object! Use the below schema for your answer.
{
    "summary": ""
}"""

FILE_SUMMARY_PROMPT = PromptTemplate(
    template="Thoroughly summarize this code file given the contents: {{file}}.\n" + _ANSWER_FORMAT,
    variable="file",
)

FOLDER_SUMMARY_PROMPT = PromptTemplate(
    template=(
        "Thoroughly summarize this folder given summaries of the files inside it: {{files}}.\n"
        "Make sure to consider every file in the folder. " + _ANSWER_FORMAT
    ),
    variable="files",
)

REPOSITORY_SUMMARY_PROMPT = PromptTemplate(
    template=(
        "Thoroughly summarize this github repository given summaries of its folders: {{summaries}}.\n"
        "Make sure to consider every folder in the repository. " + _ANSWER_FORMAT
    ),
    variable="summaries",
)

PROMPTS: dict[SummaryKind, PromptTemplate] = {
    SummaryKind.FILE: FILE_SUMMARY_PROMPT,
    SummaryKind.FOLDER: FOLDER_SUMMARY_PROMPT,
    SummaryKind.REPOSITORY: REPOSITORY_SUMMARY_PROMPT,
}


def summary_prompt(kind: SummaryKind, context: str) -> str:
    """
    Build the prompt for `kind` with `context` substituted in.

    Args:
        kind: Granularity being summarized.
        context: File content, joined file summaries or joined folder summaries.

    Returns:
        A formatted prompt string for the LLM.
    """
    return PROMPTS[kind].render(context)


__all__ = [
    "FILE_SUMMARY_PROMPT",
    "FOLDER_SUMMARY_PROMPT",
    "PROMPTS",
    "PromptTemplate",
    "REPOSITORY_SUMMARY_PROMPT",
    "summary_prompt",
]
