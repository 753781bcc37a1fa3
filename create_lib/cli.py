"""create-lib command line entry point.

Usage::

    create-lib
    python -m create_lib

All project details are asked interactively.  The template is fetched into
``./<project name>`` and its placeholders are filled in.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from rich.markup import escape

from .config import Config
from .errors import ScaffoldError
from .materializer import MaterializeResult, ProjectMaterializer
from .prompts import ProjectAnswers, collect_answers
from .utils import (
    console,
    err_console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

NEXT_STEPS = ("npm install", "npm run dev")


def build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="create-lib",
        description="Scaffold a new library from the lib-template repository.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="All project details are asked interactively.",
    )


async def scaffold(config: Config, answers: ProjectAnswers) -> MaterializeResult:
    """Materialize the template for *answers*."""
    return await ProjectMaterializer(config).materialize(answers)


def print_next_steps(project_name: str) -> None:
    console.print()
    print_success(f"Project {project_name} has been created successfully!")
    console.print()
    console.print("To get started, try:", highlight=False)
    for command in (f"cd {project_name}", *NEXT_STEPS):
        console.print(f"  {escape(command)}", highlight=False)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-lib``."""
    build_parser().parse_args(argv)

    try:
        config = Config.from_env()
        answers = collect_answers()
        print_summary_table(answers.replacements(), title="Project")
        result = asyncio.run(scaffold(config, answers))
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except Exception:
        err_console.print_exception()
        sys.exit(1)

    if result.report.failures:
        print_warning(
            f"{len(result.report.failures)} file(s) could not be processed; "
            "their placeholders were left in place."
        )
    print_next_steps(answers.project_name)


if __name__ == "__main__":
    main()
