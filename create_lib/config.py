"""create-lib configuration.

Typed settings for a scaffolding run. The template repository is fixed; the
remaining knobs tune how it is fetched and how files are rewritten. Settings
use a Pydantic v2 model so they are validated at construction time.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

TEMPLATE_REPO = "AnastasiaAtTerrestrialOrigin/lib-template"


class Config(BaseModel):
    """Settings for one scaffolding run.

    Instances are created once by the CLI entry point (usually through
    :meth:`from_env`) and passed to the materializer.
    """

    template: str = Field(default=TEMPLATE_REPO, description="Template repository identifier")
    mode: Literal["tar", "git"] = Field(
        default="tar", description="Fetch the archive over HTTPS or shallow-clone with git"
    )
    work_dir: Path = Field(default_factory=Path.cwd)
    fetch_timeout: int = Field(default=60, ge=5, description="Fetch timeout in seconds")
    force: bool = Field(default=True, description="Overwrite a non-empty target directory")
    encoding: str = Field(default="utf-8", description="Text encoding for template files")
    verbose: bool = Field(default=True)

    def target_dir(self, project_name: str) -> Path:
        """Return the absolute directory a project named *project_name* is written to.

        The name is joined verbatim: ``..`` segments and an empty name are
        not rejected.
        """
        return Path(os.path.abspath(self.work_dir / project_name))

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CREATE_LIB_MODE, CREATE_LIB_TIMEOUT, CREATE_LIB_ENCODING,
            CREATE_LIB_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_LIB_MODE"):
            kwargs["mode"] = os.environ["CREATE_LIB_MODE"]
        if os.environ.get("CREATE_LIB_TIMEOUT"):
            kwargs["fetch_timeout"] = int(os.environ["CREATE_LIB_TIMEOUT"])
        if os.environ.get("CREATE_LIB_ENCODING"):
            kwargs["encoding"] = os.environ["CREATE_LIB_ENCODING"]
        if os.environ.get("CREATE_LIB_VERBOSE"):
            kwargs["verbose"] = os.environ["CREATE_LIB_VERBOSE"].lower() not in ("0", "false", "no")
        return cls(**kwargs)
