# =============================================================================
# gateway/github.py  -  GitHub Commit Comparison Tool
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Exposes one tool, git_changes_between_versions, which asks GitHub's
#   compare endpoint for the commits between two refs of a repository and
#   returns them as pretty-printed JSON.
#
#   GET {GITHUB_API_BASE}/repos/{owner}/{repo}/compare/{from}...{to}
#
# WHAT THE CALLER GETS:
#   {
#     "repository": "owner/repo",
#     "fromVersion": "v1.0.0",
#     "toVersion": "v1.1.0",
#     "totalCommits": 2,
#     "commits": [{"sha": "abc1234", "author": "...", "message": "...", "url": "..."}]
#   }
#
#   Merge commits (message starting with "Merge") are left out, and each
#   message is cut to its first line.
#
# AUTH:
#   GITHUB_TOKEN, when set, is sent verbatim as a bearer token.  Without it
#   the request goes out unauthenticated (public repositories only, lower
#   rate limit).
# =============================================================================

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Mapping

import httpx

from gateway.catalog import ToolCatalog
from gateway.config import Settings
from gateway.dispatcher import GatewayConfig, ToolBinding
from gateway.http import (
    ClientFactory,
    UpstreamError,
    default_client_factory,
    describe_http_error,
    json_body,
    status_error,
)
from gateway.models import (
    Err,
    FieldKind,
    FieldSpec,
    HandlerResult,
    Ok,
    ToolArguments,
    ToolDescriptor,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "github-diff-mcp"
SERVER_VERSION = "1.0.0"


# =============================================================================
# Catalog entry
# =============================================================================
GIT_CHANGES_TOOL = ToolDescriptor(
    name="git_changes_between_versions",
    description="Get GitHub commit changes between two versions or tags of a repository",
    input_schema=(
        FieldSpec("repo", FieldKind.STRING, "Repository in owner/repo format", required=True),
        FieldSpec("fromVersion", FieldKind.STRING, "Older/base version or tag", required=True),
        FieldSpec("toVersion", FieldKind.STRING, "Newer/target version or tag", required=True),
    ),
)


@dataclass(frozen=True)
class CompareVersionsArgs(ToolArguments):
    repo: str
    from_version: str
    to_version: str

    _KNOWN = ("repo", "fromVersion", "toVersion")

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "CompareVersionsArgs":
        return cls(
            repo=arguments["repo"],
            from_version=arguments["fromVersion"],
            to_version=arguments["toVersion"],
            extra=cls._extra(arguments, cls._KNOWN),
        )

    def split_repo(self) -> tuple[str, str] | None:
        """Return (owner, name), or None if ``repo`` is not "owner/repo"."""
        parts = self.repo.split("/")
        owner = parts[0].strip()
        name = parts[1].strip() if len(parts) > 1 else ""
        if not owner or not name:
            return None
        return owner, name


# =============================================================================
# Result shaping (pure)
# =============================================================================
@dataclass(frozen=True)
class CommitSummary:
    sha: str
    author: str
    message: str
    url: str


def summarize_commits(commits: list[dict[str, Any]]) -> list[CommitSummary]:
    """Drop merge commits and reduce the rest to sha/author/first line/url.

    Raises:
        UpstreamError: if a commit entry is missing the fields we read.
    """
    summaries = []
    try:
        for entry in commits:
            message = entry["commit"]["message"]
            if message.startswith("Merge"):
                continue
            summaries.append(CommitSummary(
                sha=entry["sha"][:7],
                author=entry["commit"]["author"]["name"],
                message=message.split("\n")[0],
                url=entry["html_url"],
            ))
    except (KeyError, TypeError, AttributeError) as exc:
        raise UpstreamError(f"Unexpected response from GitHub API: {exc!r}") from exc
    return summaries


def render_changes(args: CompareVersionsArgs, commits: list[CommitSummary]) -> str:
    return json.dumps(
        {
            "repository": args.repo,
            "fromVersion": args.from_version,
            "toVersion": args.to_version,
            "totalCommits": len(commits),
            "commits": [asdict(c) for c in commits],
        },
        indent=2,
        ensure_ascii=False,
    )


# =============================================================================
# Handler
# =============================================================================
class GitHubTools:
    """Handlers for the GitHub server.

    Args:
        client_factory: Builds the httpx client used for one invocation.
        settings_loader: Returns the settings in effect for one invocation.
    """

    def __init__(
        self,
        client_factory: ClientFactory = default_client_factory,
        settings_loader: Callable[[], Settings] = Settings.from_env,
    ):
        self._client_factory = client_factory
        self._settings_loader = settings_loader

    async def changes_between_versions(self, args: CompareVersionsArgs) -> HandlerResult:
        repo = args.split_repo()
        if repo is None:
            return Err("Invalid repo format. Use owner/repo")
        owner, name = repo

        settings = self._settings_loader()
        try:
            async with self._client_factory(settings) as client:
                raw_commits = await self._fetch_comparison(
                    client, settings, owner, name, args.from_version, args.to_version
                )
            commits = summarize_commits(raw_commits)
        except UpstreamError as exc:
            return Err(str(exc))

        logger.info(
            "%s/%s %s...%s: %d commits (%d after dropping merges)",
            owner, name, args.from_version, args.to_version,
            len(raw_commits), len(commits),
        )
        return Ok(render_changes(args, commits))

    async def _fetch_comparison(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        owner: str,
        name: str,
        from_version: str,
        to_version: str,
    ) -> list[dict[str, Any]]:
        url = f"{settings.github_api_base}/repos/{owner}/{name}/compare/{from_version}...{to_version}"
        headers = {"Accept": "application/vnd.github+json"}
        if settings.github_token:
            headers["Authorization"] = f"Bearer {settings.github_token}"

        try:
            response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamError(describe_http_error(exc)) from exc
        if not response.is_success:
            raise status_error("GitHub API", response)

        data = json_body(response, "GitHub API")
        commits = data.get("commits") if isinstance(data, dict) else None
        if not isinstance(commits, list):
            raise UpstreamError("Unexpected response from GitHub API: no commit list")
        return commits


# =============================================================================
# Server configuration
# =============================================================================
def build_github_gateway(
    client_factory: ClientFactory = default_client_factory,
    settings_loader: Callable[[], Settings] = Settings.from_env,
) -> GatewayConfig:
    """The GitHub diff server's catalog and handler table."""
    tools = GitHubTools(client_factory, settings_loader)
    return GatewayConfig(
        name=SERVER_NAME,
        version=SERVER_VERSION,
        catalog=ToolCatalog([GIT_CHANGES_TOOL]),
        handlers={
            GIT_CHANGES_TOOL.name: ToolBinding(CompareVersionsArgs, tools.changes_between_versions),
        },
    )
