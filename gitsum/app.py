"""FastAPI application for the GitHub repository summarizer."""

import uuid
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .errors import (
    ConfigurationError,
    GitsumError,
    NotFoundError,
    RetrievalError,
    SummarizationError,
    TokenBudgetExceeded,
)
from .pipeline import SummaryOptions, run_pipeline
from .utils import get_logger

logger = get_logger(__name__)


class SummarizeRequest(BaseModel):
    owner: str
    repo: str
    branch: str = "main"
    folder: Optional[str] = None
    file: Optional[str] = None


class SummarizeResponse(BaseModel):
    task_id: str
    status: str
    message: str
    summary: Optional[str] = None
    report: Optional[dict] = None


# Initialize FastAPI app
app = FastAPI(
    title="GitHub Repository Summarizer",
    description="Summarize GitHub repositories per file, per folder and as a whole",
    version=__version__,
)


def get_pipeline():
    """Dependency returning the coroutine function that runs a summarization."""
    return run_pipeline


def status_for(error: GitsumError) -> int:
    if isinstance(error, ConfigurationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, TokenBudgetExceeded):
        return 413
    if isinstance(error, (RetrievalError, SummarizationError)):
        return 502
    return 500


@app.post("/summarize", response_model=SummarizeResponse)
async def summarize_repo(request: SummarizeRequest, pipeline=Depends(get_pipeline)) -> SummarizeResponse:
    """
    Summarize a GitHub repository, one of its folders, or a single file.

    The request runs synchronously; the response carries the final summary and
    the full report of every file and folder visited.
    """
    task_id = str(uuid.uuid4())
    target = f"{request.owner}/{request.repo}@{request.branch}"
    options = SummaryOptions(**request.model_dump())

    try:
        report = await pipeline(options)
    except GitsumError as e:
        logger.error(f"Task {task_id} failed: {e}")
        raise HTTPException(status_code=status_for(e), detail=str(e))

    logger.info(f"Task {task_id} completed successfully for {target}")
    return SummarizeResponse(
        task_id=task_id,
        status="finished",
        message=f"Analysis completed for {target}.",
        summary=report.summary,
        report=report.model_dump(),
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
