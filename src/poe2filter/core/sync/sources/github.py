"""
GitHub source adapter.

Resolves ``github:`` descriptors against the GitHub REST API. The payload
shape selects the strategy:

- ``owner/repo``: latest release. Watermark is the tag name, the archive
  is the release's zipball and the note is the release body.
- ``owner/repo/branch``: head of a branch. Watermark is the commit SHA,
  the archive is the commit's source zip and the note is the commit message.

Example:
    >>> source = GitHubSource(client, config)
    >>> record = await source.resolve("NeverSinkDev/NeverSink-PoE2litefilter")
    >>> record.watermark
    '0.5.2'
"""

import logging
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from poe2filter.core.config.models import SyncConfig
from poe2filter.core.exceptions import MalformedDescriptor, RemoteProtocolError
from poe2filter.core.sync.http import fetch_json
from poe2filter.core.sync.models import VersionRecord
from poe2filter.core.sync.sources.base import register_source

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"
API_JSON_TYPE = "application/vnd.github+json"


class GitHubRelease(BaseModel):
    """The fields of a release object that the sync needs."""

    tag_name: str = Field(..., min_length=1)
    zipball_url: str = Field(..., min_length=1)
    body: str | None = None


class GitHubCommitMeta(BaseModel):
    message: str


class GitHubCommit(BaseModel):
    sha: str = Field(..., min_length=1)
    commit: GitHubCommitMeta


class GitHubBranch(BaseModel):
    """The fields of a branch object that the sync needs."""

    name: str | None = None
    commit: GitHubCommit


_releases_adapter = TypeAdapter(list[GitHubRelease])


@dataclass(frozen=True)
class ReleaseStrategy:
    """Track the latest release of a repository."""

    owner: str
    repo: str


@dataclass(frozen=True)
class BranchStrategy:
    """Track the head commit of a branch."""

    owner: str
    repo: str
    branch: str


Strategy = ReleaseStrategy | BranchStrategy


def parse_payload(payload: str) -> Strategy:
    """
    Select the strategy for a ``github:`` payload.

    Args:
        payload: ``owner/repo`` or ``owner/repo/branch``

    Returns:
        ReleaseStrategy or BranchStrategy

    Raises:
        MalformedDescriptor: For any other number of segments, or an empty segment
    """
    parts = payload.split("/")
    if all(parts):
        if len(parts) == 2:
            return ReleaseStrategy(owner=parts[0], repo=parts[1])
        if len(parts) == 3:
            return BranchStrategy(owner=parts[0], repo=parts[1], branch=parts[2])
    raise MalformedDescriptor(
        f"github:{payload}",
        "GitHub source must be either github:owner/repo or github:owner/repo/branch",
    )


@register_source("github")
class GitHubSource:
    """
    Version source for GitHub releases and branches.

    All API calls carry the versioned-API and JSON accept headers, plus a
    bearer token when one is configured.
    """

    def __init__(self, client: httpx.AsyncClient, config: SyncConfig) -> None:
        self.client = client
        self.config = config

    @property
    def name(self) -> str:
        """Get the name of this source."""
        return "github"

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every GitHub API request."""
        headers = {
            "X-GitHub-Api-Version": API_VERSION,
            "Accept": API_JSON_TYPE,
        }
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return headers

    async def resolve(self, payload: str) -> VersionRecord | None:
        """
        Resolve a payload to the latest release or branch head.

        Returns:
            VersionRecord, or None when a repository has no releases

        Raises:
            MalformedDescriptor: If the payload has the wrong shape
            RemoteRequestError: If a request fails (including an unknown branch)
            RemoteProtocolError: If a response has an unexpected shape
        """
        strategy = parse_payload(payload)
        if isinstance(strategy, BranchStrategy):
            record = await self.resolve_branch(strategy)
        else:
            record = await self.resolve_release(strategy)

        if record is not None:
            logger.info(f"Found github:{payload} with watermark: {record.watermark}")
        return record

    async def resolve_release(self, strategy: ReleaseStrategy) -> VersionRecord | None:
        """
        Fetch the most recent release.

        An empty release list is not an error: the repository simply has
        nothing to install yet.
        """
        url = f"{self.config.api_url}/repos/{strategy.owner}/{strategy.repo}/releases"
        logger.info(f"Fetching latest release of {strategy.owner}/{strategy.repo}")
        data = await fetch_json(
            self.client,
            url,
            source=self.name,
            headers=self.headers,
            params={"per_page": 1, "page": 1},
        )

        try:
            releases = _releases_adapter.validate_python(data)
        except ValidationError as e:
            raise RemoteProtocolError(
                self.name,
                "Unexpected release list format from GitHub API",
                url=url,
                errors=e.error_count(),
            ) from e

        if not releases:
            logger.info(f"No releases published for {strategy.owner}/{strategy.repo}")
            return None

        release = releases[0]
        return VersionRecord(
            download_url=release.zipball_url,
            watermark=release.tag_name,
            note=release.body,
        )

    async def resolve_branch(self, strategy: BranchStrategy) -> VersionRecord:
        """
        Fetch the head commit of a branch.

        A missing branch comes back from GitHub as a 404 and is raised as
        RemoteRequestError.
        """
        url = (
            f"{self.config.api_url}/repos/{strategy.owner}/{strategy.repo}"
            f"/branches/{strategy.branch}"
        )
        logger.info(
            f"Fetching latest commit of {strategy.owner}/{strategy.repo}@{strategy.branch}"
        )
        data = await fetch_json(self.client, url, source=self.name, headers=self.headers)

        try:
            branch = GitHubBranch.model_validate(data)
        except ValidationError as e:
            raise RemoteProtocolError(
                self.name,
                "Unexpected branch format from GitHub API",
                url=url,
                errors=e.error_count(),
            ) from e

        sha = branch.commit.sha
        download_url = (
            f"{self.config.archive_url}/{strategy.owner}/{strategy.repo}/archive/{sha}.zip"
        )
        return VersionRecord(
            download_url=download_url,
            watermark=sha,
            note=branch.commit.commit.message,
        )
