"""Main materialization orchestrator.

Fetches the template into the project directory, then rewrites the copied
files with the project's answers.  The run is strictly linear::

    not_started -> fetching -> fetched -> walking -> done

Any unrecovered error moves the run to ``failed``; nothing is retried.
"""

from __future__ import annotations

import time
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from ..config import Config
from ..prompts import ProjectAnswers
from ..utils import create_progress, format_duration, print_info
from .fetcher import TemplateFetcher
from .substitution import SubstitutionReport, replace_placeholders


class MaterializerState(str, Enum):
    NOT_STARTED = "not_started"
    FETCHING = "fetching"
    FETCHED = "fetched"
    WALKING = "walking"
    DONE = "done"
    FAILED = "failed"


class MaterializeResult(BaseModel):
    """What a successful run produced."""

    project_dir: Path
    report: SubstitutionReport
    duration: float = 0.0


class ProjectMaterializer:
    """Turns a set of answers into a project directory.

    The template comes from ``config.template``; the project is written to
    ``config.target_dir(answers.project_name)``.  A materializer instance
    performs a single run.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.state = MaterializerState.NOT_STARTED
        self.fetcher = TemplateFetcher(
            config.template,
            mode=config.mode,
            timeout=config.fetch_timeout,
            force=config.force,
            verbose=config.verbose,
        )

    async def materialize(self, answers: ProjectAnswers) -> MaterializeResult:
        """Fetch the template and substitute placeholders.

        Returns:
            A ``MaterializeResult`` for the generated project.

        Raises:
            ScaffoldError: On fetch failure or an unlistable directory.
                Per-file failures are reported, not raised.
        """
        start = time.monotonic()
        target = self.config.target_dir(answers.project_name)

        try:
            self.state = MaterializerState.FETCHING
            print_info(f"Cloning template into {target}...")
            with create_progress() as progress:
                progress.add_task(f"Fetching {self.fetcher.source.display}", total=None)
                await self.fetcher.fetch(target)
            self.state = MaterializerState.FETCHED

            replacements = answers.replacements()
            self.state = MaterializerState.WALKING
            print_info("Replacing placeholders...")
            report = await replace_placeholders(
                target, replacements, encoding=self.config.encoding
            )
        except BaseException:
            self.state = MaterializerState.FAILED
            raise

        self.state = MaterializerState.DONE
        elapsed = time.monotonic() - start
        if self.config.verbose:
            print_info(
                f"Updated {len(report.files_changed)} of {report.files_scanned} files "
                f"in {format_duration(elapsed)}"
            )
        return MaterializeResult(project_dir=target, report=report, duration=elapsed)
