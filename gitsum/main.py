"""Command-line entry point: summarize a GitHub repository, folder or file.

Usage:
  - Set credentials (or pass --git-key / --open-ai-key):
      export GITHUB_KEY=...
      export OPEN_AI_KEY=...
  - Run as a module from repository root:
      python -m gitsum.main sum --username psf --repo requests --branch main
      python -m gitsum.main sum -u psf -r requests -b main --folder src/requests
      python -m gitsum.main sum -u psf -r requests -b main --folder src/requests --file api.py

Summaries are printed bottom-up as they are produced.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .errors import GitsumError
from .llm.models import SummaryKind
from .pipeline import Report, SummaryOptions, run_pipeline
from .utils import get_logger

logger = get_logger(__name__)

LABELS = {
    SummaryKind.FILE: "File",
    SummaryKind.FOLDER: "Folder",
    SummaryKind.REPOSITORY: "Summary",
}


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitsum",
        description=(
            "Summarize a github repository using gpt. Summarize an entire repository "
            "(useful in cases where there is no README), folders, or files."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sum_parser = subparsers.add_parser("sum", help="Summarize a github repository")
    sum_parser.add_argument("-u", "--username", required=True, help="The username of the repository owner")
    sum_parser.add_argument("-r", "--repo", required=True, help="The name of the repository")
    sum_parser.add_argument("-b", "--branch", required=True, help="The branch of the repository")
    sum_parser.add_argument("-g", "--git-key", default=None, help="Your github api key (default: $GITHUB_KEY)")
    sum_parser.add_argument("-o", "--open-ai-key", default=None, help="Your openai api key (default: $OPEN_AI_KEY)")
    sum_parser.add_argument("-f", "--folder", default=None, help="The folder to summarize")
    sum_parser.add_argument("-s", "--file", default=None, help="The file to summarize (requires --folder)")
    sum_parser.add_argument("--output", type=Path, default=None, help="Write the report as JSON to this path")
    sum_parser.add_argument(
        "-m", "--max-tokens", type=int, default=None,
        help="Files with more tokens than this are not summarized (default: 4096)",
    )
    sum_parser.add_argument(
        "-x", "--temperature", type=float, default=None,
        help="What sampling temperature to use, between 0 and 2 (default: 0.7)",
    )
    sum_parser.add_argument(
        "-t", "--top-p", type=float, default=None,
        help="Nucleus sampling probability mass (default: 1.0)",
    )
    sum_parser.add_argument(
        "-p", "--presence-penalty", type=float, default=None,
        help="Between -2.0 and 2.0, penalizes tokens that already appeared (default: 0.0)",
    )
    sum_parser.add_argument(
        "-q", "--frequency-penalty", type=float, default=None,
        help="Between -2.0 and 2.0, penalizes tokens by their frequency so far (default: 0.0)",
    )
    return parser


def print_summary(kind: SummaryKind, name: str, summary: str) -> None:
    if kind is SummaryKind.REPOSITORY:
        print(f"{LABELS[kind]}: {summary}")
    else:
        print(f"{LABELS[kind]} {name}: {summary}")


def write_report(report: Report, output: Path) -> None:
    with open(output, "w", encoding="utf-8") as f:
        json.dump(report.model_dump(), f, indent=2, ensure_ascii=False)
    print(f"Report written to: {output}")


async def run(args: argparse.Namespace) -> int:
    options = SummaryOptions(
        owner=args.username,
        repo=args.repo,
        branch=args.branch,
        folder=args.folder,
        file=args.file,
        git_key=args.git_key,
        open_ai_key=args.open_ai_key,
        max_tokens=args.max_tokens,
        temperature=args.temperature,
        top_p=args.top_p,
        presence_penalty=args.presence_penalty,
        frequency_penalty=args.frequency_penalty,
    )
    try:
        report = await run_pipeline(options, on_summary=print_summary)
    except GitsumError as e:
        logger.error(f"Summarization failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        try:
            write_report(report, args.output)
        except OSError as e:
            logger.error(f"Failed to write report to {args.output}: {e}")
            print(f"Error writing report: {e}", file=sys.stderr)
            return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = create_arg_parser()
    args = parser.parse_args(argv)
    if args.file and not args.folder:
        parser.error("You must specify a folder to summarize a file")
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
