"""Template retrieval.

Downloads a template repository into a target directory without any local
cache.  Two modes are supported:

* ``tar`` -- fetch the host's ``.tar.gz`` archive over HTTPS and unpack it,
  dropping the archive's top-level directory.
* ``git`` -- shallow-clone with ``git`` into a temporary directory and copy
  the checkout without its ``.git`` metadata.

Existing files in the target are overwritten.
"""

from __future__ import annotations

import asyncio
import io
import re
import shutil
import tarfile
import tempfile
from pathlib import Path, PurePosixPath

import httpx
from pydantic import BaseModel

from ..errors import ScaffoldError
from ..utils import ensure_dir, is_empty_dir, print_info, run_command

STAGE = "fetching"

SITE_HOSTS: dict[str, str] = {
    "github": "github.com",
    "gitlab": "gitlab.com",
    "bitbucket": "bitbucket.org",
}

# [https://host/ | git@host: | site:]user/repo[/subdir...][#ref]
_SOURCE_RE = re.compile(
    r"^(?:(?:https://)?(?P<host>[^:/]+\.[^:/]+)/|git@(?P<git_host>[^:/]+)[:/]|(?P<site>[^/]+):)?"
    r"(?P<user>[^/\s]+)/(?P<name>[^/\s#]+)"
    r"(?P<subdir>(?:/[^/\s#]+)+)?/?"
    r"(?:#(?P<ref>.+))?$"
)


class TemplateSource(BaseModel):
    """A parsed template repository identifier."""

    site: str = "github"
    user: str
    name: str
    ref: str = "HEAD"
    subdir: str = ""

    @classmethod
    def parse(cls, src: str) -> "TemplateSource":
        """Parse ``[site:]user/repo[/subdir][#ref]`` or an https/ssh URL.

        Raises:
            ScaffoldError: If *src* is not a recognised identifier or names
                an unsupported host.
        """
        match = _SOURCE_RE.match(src.strip())
        if match is None:
            raise ScaffoldError(STAGE, f"Could not parse template repository: {src!r}")

        site = match.group("host") or match.group("git_host") or match.group("site") or "github"
        site = re.sub(r"\.(com|org)$", "", site)
        if site not in SITE_HOSTS:
            raise ScaffoldError(STAGE, f"Unsupported template host {site!r} in {src!r}")

        name = match.group("name")
        if name.endswith(".git"):
            name = name[: -len(".git")]

        return cls(
            site=site,
            user=match.group("user"),
            name=name,
            ref=match.group("ref") or "HEAD",
            subdir=(match.group("subdir") or "").strip("/"),
        )

    @property
    def host(self) -> str:
        return SITE_HOSTS[self.site]

    @property
    def display(self) -> str:
        """Human-readable ``user/repo[/subdir]#ref`` form."""
        subdir = f"/{self.subdir}" if self.subdir else ""
        return f"{self.user}/{self.name}{subdir}#{self.ref}"

    @property
    def git_url(self) -> str:
        return f"https://{self.host}/{self.user}/{self.name}.git"

    @property
    def tarball_url(self) -> str:
        """Archive download URL for this source on its host."""
        if self.site == "gitlab":
            return (
                f"https://{self.host}/{self.user}/{self.name}/-/archive/"
                f"{self.ref}/{self.name}-{self.ref}.tar.gz"
            )
        if self.site == "bitbucket":
            return f"https://{self.host}/{self.user}/{self.name}/get/{self.ref}.tar.gz"
        return f"https://{self.host}/{self.user}/{self.name}/archive/{self.ref}.tar.gz"


class TemplateFetcher:
    """Fetches a template repository into a local directory.

    Every fetch goes to the network; nothing is cached between runs.
    """

    def __init__(
        self,
        source: str | TemplateSource,
        *,
        mode: str = "tar",
        timeout: int = 60,
        force: bool = True,
        verbose: bool = True,
    ) -> None:
        self.source = source if isinstance(source, TemplateSource) else TemplateSource.parse(source)
        self.mode = mode
        self.timeout = timeout
        self.force = force
        self.verbose = verbose

    async def fetch(self, dest: str | Path) -> Path:
        """Retrieve the template tree into *dest*.

        Returns:
            The destination path.

        Raises:
            ScaffoldError: If the destination is non-empty and ``force`` is
                off, or if the download, extraction or clone fails.
        """
        dest = Path(dest)
        if not self.force and not await asyncio.to_thread(is_empty_dir, dest):
            raise ScaffoldError(STAGE, f"Destination directory is not empty: {dest}")

        if self.mode == "git":
            await self._clone(dest)
        else:
            data = await self._download()
            count = await asyncio.to_thread(_extract_archive, data, dest, self.source.subdir)
            if self.verbose:
                print_info(f"extracted {count} entries from {self.source.tarball_url}")

        if self.verbose:
            print_info(f"cloned {self.source.display} to {dest}")
        return dest

    # -- tar mode ----------------------------------------------------------

    async def _download(self) -> bytes:
        url = self.source.tarball_url
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers={"Cache-Control": "no-cache"})
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as exc:
            raise ScaffoldError(
                STAGE,
                f"Could not find template {self.source.display} "
                f"(HTTP {exc.response.status_code} from {url})",
            ) from exc
        except httpx.TimeoutException as exc:
            raise ScaffoldError(
                STAGE, f"Download of {url} timed out after {self.timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise ScaffoldError(STAGE, f"Could not download {url}: {exc}") from exc

    # -- git mode ----------------------------------------------------------

    async def _clone(self, dest: Path) -> None:
        cmd = ["git", "clone", "--depth", "1"]
        if self.source.ref != "HEAD":
            cmd += ["--branch", self.source.ref]

        with tempfile.TemporaryDirectory(prefix="create-lib-") as tmp:
            checkout = Path(tmp) / "checkout"
            try:
                code, _, stderr = await run_command(
                    [*cmd, self.source.git_url, str(checkout)], timeout=self.timeout
                )
            except OSError as exc:
                raise ScaffoldError(STAGE, f"Could not run git: {exc}") from exc
            if code != 0:
                raise ScaffoldError(
                    STAGE,
                    f"git clone of {self.source.display} failed: {stderr or f'exit code {code}'}",
                )

            source_dir = checkout / self.source.subdir if self.source.subdir else checkout
            if not source_dir.is_dir():
                raise ScaffoldError(
                    STAGE, f"Subdirectory {self.source.subdir!r} not found in {self.source.display}"
                )
            await asyncio.to_thread(_copy_tree, source_dir, dest)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _strip_archive_path(name: str, subdir: str) -> PurePosixPath | None:
    """Map an archive member name to its path relative to the template root.

    Returns ``None`` for the archive's top-level directory and for members
    outside *subdir*.
    """
    parts = PurePosixPath(name).parts
    if len(parts) < 2:
        return None
    rel = PurePosixPath(*parts[1:])
    if subdir:
        try:
            rel = rel.relative_to(subdir)
        except ValueError:
            return None
        if rel == PurePosixPath("."):
            return None
    return rel


def _extract_archive(data: bytes, dest: Path, subdir: str = "") -> int:
    """Unpack a gzipped tarball into *dest*, returning the number of entries.

    Unsafe members (absolute paths, ``..`` segments, links leaving *dest*)
    abort the extraction.
    """
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tar:
            members: list[tarfile.TarInfo] = []
            for member in tar.getmembers():
                rel = _strip_archive_path(member.name, subdir)
                if rel is None:
                    continue
                member.name = str(rel)
                if member.islnk():
                    link = _strip_archive_path(member.linkname, subdir)
                    if link is None:
                        continue
                    member.linkname = str(link)
                members.append(member)

            ensure_dir(dest)
            tar.extractall(dest, members=members, filter="data")
    except tarfile.TarError as exc:
        raise ScaffoldError(STAGE, f"Could not extract template archive: {exc}") from exc
    return len(members)


def _copy_tree(src: Path, dest: Path) -> None:
    ensure_dir(dest)
    shutil.copytree(
        src,
        dest,
        symlinks=True,
        dirs_exist_ok=True,
        ignore=shutil.ignore_patterns(".git"),
    )
