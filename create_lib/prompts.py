"""Interactive collection of project metadata.

Asks the operator six questions in order and turns the answers into a
``ProjectAnswers`` model.  When a repository URL is given, the npm-style
``repository``, ``homepage`` and ``bugs`` values are derived from it.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field
from rich.prompt import Prompt

from .utils import console

AskFn = Callable[[str, str], str]


class Question(BaseModel):
    """One labelled prompt with the value used for empty input."""

    name: str
    message: str
    default: str = ""


QUESTIONS: tuple[Question, ...] = (
    Question(name="projectName", message="Project name:"),
    Question(name="description", message="Description:"),
    Question(name="author", message="Author:"),
    Question(name="license", message="License:", default="MIT"),
    Question(name="keywords", message="Keywords:", default="template, npm, library"),
    Question(name="repository", message="Repository:"),
)


class ProjectAnswers(BaseModel):
    """Operator answers plus the fields derived from the repository URL.

    ``homepage`` and ``bugs`` are set if and only if ``repository`` is
    non-empty.  Field aliases are the placeholder names used in templates.
    """

    model_config = ConfigDict(populate_by_name=True)

    project_name: str = Field(default="", alias="projectName")
    description: str = ""
    author: str = ""
    license: str = "MIT"
    keywords: str = "template, npm, library"
    repository: str = ""
    homepage: str | None = None
    bugs: str | None = None

    @classmethod
    def from_responses(cls, responses: dict[str, str]) -> "ProjectAnswers":
        """Build answers from raw prompt responses, deriving URL fields."""
        values = dict(responses)
        values.update(derive_repository_urls(values.get("repository", "")))
        return cls.model_validate(values)

    def replacements(self) -> dict[str, str]:
        """Return the placeholder name to value mapping for substitution."""
        return self.model_dump(by_alias=True, exclude_none=True)


def derive_repository_urls(repository: str) -> dict[str, str]:
    """Derive npm ``repository``/``homepage``/``bugs`` values from a git URL.

    Returns an empty dict for an empty URL.  No validation is performed.

    Example::

        derive_repository_urls("https://example.com/org/repo.git")
        -> {"repository": "git+https://example.com/org/repo.git",
            "homepage": "https://example.com/org/repo#readme",
            "bugs": "https://example.com/org/repo#issues"}
    """
    if not repository:
        return {}

    url = repository[: -len(".git")] if repository.endswith(".git") else repository
    return {
        "repository": f"git+{url}.git",
        "homepage": f"{url}#readme",
        "bugs": f"{url}#issues",
    }


def _rich_ask(message: str, default: str) -> str:
    # Prompt appends its own ": " suffix.
    return Prompt.ask(
        message.rstrip(":"), default=default, show_default=bool(default), console=console
    )


def collect_answers(
    ask: AskFn | None = None,
    questions: tuple[Question, ...] = QUESTIONS,
) -> ProjectAnswers:
    """Ask every question in turn and return the resulting answers.

    Args:
        ask: ``(message, default) -> answer`` callable.  Defaults to a Rich
            prompt on the console.
        questions: Questions to ask, in order.

    Returns:
        The validated ``ProjectAnswers``.
    """
    ask = ask or _rich_ask
    responses: dict[str, str] = {}
    for question in questions:
        answer = ask(question.message, question.default)
        responses[question.name] = answer if answer else question.default
    return ProjectAnswers.from_responses(responses)
