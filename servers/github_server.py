# =============================================================================
# servers/github_server.py  -  GitHub Diff MCP Server
# =============================================================================
#
#   github-diff-mcp                  (console script)
#   python -m servers.github_server  (from a checkout)
#
# Tools: git_changes_between_versions
# Env:   GITHUB_TOKEN (optional), GITHUB_API_BASE, HTTP_TIMEOUT_SECONDS
# =============================================================================

from gateway.github import build_github_gateway
from servers.mcp_server import run


def main() -> None:
    run(build_github_gateway, "GitHub Diff MCP Server")


if __name__ == "__main__":
    main()
