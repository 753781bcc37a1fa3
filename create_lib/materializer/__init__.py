"""create-lib materializer -- turns the template repository into a project.

Fetches the template tree into the project directory and substitutes the
``{{ placeholder }}`` tokens in every copied file.

Quick usage::

    from create_lib.config import Config
    from create_lib.materializer import ProjectMaterializer
    from create_lib.prompts import ProjectAnswers

    answers = ProjectAnswers(project_name="my-lib", author="Jane")
    result = await ProjectMaterializer(Config()).materialize(answers)
"""

from create_lib.materializer.fetcher import TemplateFetcher, TemplateSource
from create_lib.materializer.generator import (
    MaterializerState,
    MaterializeResult,
    ProjectMaterializer,
)
from create_lib.materializer.substitution import (
    SubstitutionReport,
    replace_placeholders,
    substitute_placeholders,
)

__all__ = [
    "MaterializeResult",
    "MaterializerState",
    "ProjectMaterializer",
    "SubstitutionReport",
    "TemplateFetcher",
    "TemplateSource",
    "replace_placeholders",
    "substitute_placeholders",
]
