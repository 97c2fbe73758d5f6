"""Linear GraphQL client for fetching completed work."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from ..utils.exceptions import LinearIntegrationError
from ..utils.logging_config import get_logger
from ..utils.validators import InputValidator
from .base_client import BaseIntegrationClient

LINEAR_GRAPHQL_URL = "https://api.linear.app/graphql"

COMPLETED_ISSUES_QUERY = """
query {
  viewer {
    assignedIssues(
      filter: {
        completedAt: {
          gte: "%(start)sT00:00:00Z",
          lte: "%(end)sT23:59:59Z"
        }
      }
    ) {
      nodes {
        id
        identifier
        title
        description
        completedAt
        url
        state {
          name
        }
        project {
          name
        }
        team {
          key
        }
        labels {
          nodes {
            name
          }
        }
      }
    }
  }
}
"""

VIEWER_QUERY = "query { viewer { id name } }"


@dataclass(frozen=True)
class Issue:
    """A completed Linear issue."""

    id: str
    identifier: str
    title: str
    completed_at: str
    url: str
    state_name: str = ""
    description: Optional[str] = None
    project_name: Optional[str] = None
    team_key: Optional[str] = None
    labels: Tuple[str, ...] = ()

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Issue":
        """Build an issue from an ``assignedIssues`` GraphQL node."""
        state = node.get("state") or {}
        project = node.get("project") or {}
        team = node.get("team") or {}
        label_nodes = (node.get("labels") or {}).get("nodes") or []

        return cls(
            id=node.get("id", ""),
            identifier=node.get("identifier", ""),
            title=node.get("title", ""),
            description=node.get("description"),
            completed_at=node.get("completedAt") or "",
            url=node.get("url", ""),
            state_name=state.get("name", ""),
            project_name=project.get("name"),
            team_key=team.get("key"),
            labels=tuple(label["name"] for label in label_nodes if "name" in label),
        )


def build_completed_issues_query(start_date: date, end_date: date) -> str:
    """Query for the viewer's issues completed within the inclusive range."""
    return COMPLETED_ISSUES_QUERY % {
        "start": start_date.isoformat(),
        "end": end_date.isoformat(),
    }


def _first_error_message(body: Dict[str, Any]) -> Optional[str]:
    errors = body.get("errors")
    if not errors:
        return None

    first = errors[0]
    if isinstance(first, dict):
        return first.get("message") or "Unknown Linear API error"
    return str(first)


class LinearClient(BaseIntegrationClient):
    """Client for the Linear GraphQL API."""

    service_name = "linear"

    def __init__(
        self,
        api_key: str,
        api_url: str = LINEAR_GRAPHQL_URL,
        timeout: int = 30,
    ):
        InputValidator.validate_api_key(api_key, allow_bearer=True)
        InputValidator.validate_url(api_url)

        super().__init__(base_url=api_url, timeout=timeout)
        self.api_key = api_key

    def _get_default_headers(self) -> Dict[str, str]:
        headers = super()._get_default_headers()
        # Personal API keys are sent as-is; OAuth tokens carry their own prefix
        headers["Authorization"] = self.api_key
        return headers

    async def execute_query(self, query: str) -> Dict[str, Any]:
        """POST a GraphQL document and return its ``data`` member.

        Raises:
            LinearIntegrationError: If the body reports errors or has no data.
        """
        body = await self.post(json_data={"query": query})

        if not isinstance(body, dict):
            raise LinearIntegrationError("Unexpected response from Linear API")

        message = _first_error_message(body)
        if message is not None:
            self.logger.error(f"Linear API error: {message}")
            raise LinearIntegrationError(message, {"errors": body["errors"]})

        data = body.get("data")
        if not isinstance(data, dict):
            raise LinearIntegrationError("Linear API response did not include data")

        return data

    async def fetch_completed_issues(
        self, start_date: date, end_date: date
    ) -> List[Issue]:
        """Fetch issues assigned to the viewer and completed in the range.

        Issues are returned in the order the API lists them. Results are not
        paginated.
        """
        query = build_completed_issues_query(start_date, end_date)
        data = await self.execute_query(query)

        try:
            nodes = data["viewer"]["assignedIssues"]["nodes"]
        except (KeyError, TypeError) as e:
            raise LinearIntegrationError(
                f"Unexpected Linear response shape: missing {e}"
            ) from e

        issues = [Issue.from_node(node) for node in nodes]
        self.logger.info(
            f"Fetched {len(issues)} completed issues for "
            f"{start_date.isoformat()} to {end_date.isoformat()}"
        )
        return issues

    async def validate_connection(self) -> bool:
        """Check the key by reading the authenticated viewer."""
        try:
            data = await self.execute_query(VIEWER_QUERY)
        except Exception as e:
            self.security_logger.log_authentication_attempt(
                service="linear", success=False, error=str(e)
            )
            self.logger.error(f"Linear connection test failed: {e}")
            return False

        viewer = data.get("viewer") or {}
        self.security_logger.log_authentication_attempt(
            service="linear", success=True, viewer=viewer.get("name")
        )
        return bool(viewer.get("id"))
