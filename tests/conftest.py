"""Shared pytest fixtures for the create-lib test suite.

Provides reusable fixtures for:
- Template trees on disk containing placeholder tokens
- In-memory ``.tar.gz`` archives shaped like repository downloads
- Mocked ``httpx.AsyncClient`` instances
- Sample answer sets
"""

from __future__ import annotations

import io
import tarfile
import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from create_lib.prompts import ProjectAnswers


# ---------------------------------------------------------------------------
# Template content
# ---------------------------------------------------------------------------

PACKAGE_JSON = textwrap.dedent("""\
    {
      "name": "{{ projectName }}",
      "description": "{{description}}",
      "author": "{{  author  }}",
      "license": "{{ license }}",
      "keywords": "{{ keywords }}",
      "repository": "{{ repository }}",
      "homepage": "{{ homepage }}",
      "bugs": "{{ bugs }}",
      "private": "{{ unknownKey }}"
    }
""")

README = "# {{ projectName }}\n\n{{ description }}\n"

TEMPLATE_FILES: dict[str, str] = {
    "package.json": PACKAGE_JSON,
    "README.md": README,
    "src/index.ts": "export const name = '{{projectName}}';\n",
    "src/util/helpers.ts": "// no placeholders here\n",
    "LICENSE": "{{ license }} License\n\nCopyright (c) {{ author }}\n",
}


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Write *files* (relative path -> content) below *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def make_tarball(files: dict[str, str | bytes], top: str = "lib-template-main") -> bytes:
    """Build a gzipped tarball with every file under a single top directory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        top_info = tarfile.TarInfo(top)
        top_info.type = tarfile.DIRTYPE
        top_info.mode = 0o755
        tar.addfile(top_info)
        for rel, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(f"{top}/{rel}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def mock_http_client(content: bytes = b"", *, get_side_effect=None) -> AsyncMock:
    """Return an ``AsyncMock`` standing in for ``httpx.AsyncClient``."""
    mock_response = MagicMock()
    mock_response.content = content
    mock_response.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    if get_side_effect is not None:
        mock_client.get = AsyncMock(side_effect=get_side_effect)
    else:
        mock_client.get = AsyncMock(return_value=mock_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """A copied template directory containing placeholder tokens."""
    return write_tree(tmp_path / "my-lib", TEMPLATE_FILES)


@pytest.fixture
def template_tarball() -> bytes:
    """The template files packed like a GitHub archive download."""
    return make_tarball(TEMPLATE_FILES)


@pytest.fixture
def sample_answers() -> ProjectAnswers:
    """Answers as produced by the prompts for a project with a repository."""
    return ProjectAnswers.from_responses({
        "projectName": "my-lib",
        "description": "A tiny library",
        "author": "Jane Doe",
        "license": "MIT",
        "keywords": "template, npm, library",
        "repository": "https://example.com/org/repo.git",
    })


@pytest.fixture
def answers_without_repository() -> ProjectAnswers:
    """Answers for a project with no repository URL."""
    return ProjectAnswers.from_responses({
        "projectName": "my-lib",
        "description": "A tiny library",
        "author": "Jane Doe",
        "license": "ISC",
        "keywords": "tools",
        "repository": "",
    })
