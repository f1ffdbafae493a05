from typing import Iterable, Optional

from discovery.models import Contributor, IssueSummary, ProcessedRepository


MAX_CONTRIBUTORS = 10
MAX_ISSUES = 5


def format_number(num: int) -> str:
    """
    1234 -> "1.2k", 2500000 -> "2.5M"
    """
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}k"
    return str(num)


def map_contributors(items: Iterable[dict]) -> tuple:
    contributors = [
        Contributor(
            login=item["login"],
            avatar_url=item.get("avatar_url") or "",
            contributions=item.get("contributions") or 0,
        )
        for item in items
        if item.get("login")
    ]
    contributors.sort(key=lambda c: c.contributions, reverse=True)
    return tuple(contributors[:MAX_CONTRIBUTORS])


def map_issues(items: Iterable[dict]) -> tuple:
    issues = []
    for item in items:
        # issues endpoint는 PR도 같이 내려줌
        if "pull_request" in item:
            continue
        issues.append(
            IssueSummary(
                title=item["title"],
                number=item["number"],
                html_url=item.get("html_url") or item.get("url", ""),
            )
        )
    return tuple(issues[:MAX_ISSUES])


def map_rest_repository(
    raw: dict,
    contributors: tuple = (),
    issues: tuple = (),
    pull_requests: int = 0,
    readme: Optional[str] = None,
) -> ProcessedRepository:
    owner = raw.get("owner") or {}
    license_info = raw.get("license") or {}

    return ProcessedRepository(
        # --------------------
        # Identity
        # --------------------
        id=raw["id"],
        name=raw["name"],
        full_name=raw["full_name"],
        owner=owner.get("login", raw["full_name"].split("/")[0]),
        owner_avatar=owner.get("avatar_url") or "",

        # --------------------
        # Signals
        # --------------------
        description=raw.get("description") or None,
        stars=format_number(raw.get("stargazers_count", 0)),
        forks=format_number(raw.get("forks_count", 0)),
        issues_count=format_number(raw.get("open_issues_count", 0)),
        pull_requests=format_number(pull_requests),
        language=raw.get("language"),
        topics=tuple(raw.get("topics") or ()),
        homepage=raw.get("homepage") or None,
        license=license_info.get("name"),
        size=raw.get("size", 0),
        default_branch=raw.get("default_branch") or "main",

        # --------------------
        # Activity
        # --------------------
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),

        # --------------------
        # Secondary data
        # --------------------
        contributors=contributors,
        issues=issues,
        readme=readme or "",
    )


def map_graphql_repository(raw: dict, node: dict) -> ProcessedRepository:
    """
    Map one `repository` node of the combined GraphQL query.

    `raw` is the REST summary the aggregation started from; it supplies the
    numeric id and full name, which the GraphQL node does not carry in the
    same form.
    """
    owner = node.get("owner") or {}
    open_issues = node.get("openIssues") or {}
    language = node.get("primaryLanguage") or {}
    license_info = node.get("licenseInfo") or {}
    branch = node.get("defaultBranchRef") or {}
    readme_blob = node.get("object") or {}

    users = []
    for user in (node.get("mentionableUsers") or {}).get("nodes") or []:
        if not user:
            continue
        count = (user.get("contributionsCollection") or {}).get("totalCommitContributions") or 0
        if count > 0:
            users.append({"login": user["login"], "avatar_url": user.get("avatarUrl"), "contributions": count})

    issues = tuple(
        IssueSummary(title=issue["title"], number=issue["number"], html_url=issue["url"])
        for issue in (open_issues.get("nodes") or [])[:MAX_ISSUES]
    )

    topics = tuple(
        topic_node["topic"]["name"]
        for topic_node in (node.get("repositoryTopics") or {}).get("nodes") or []
    )

    return ProcessedRepository(
        id=raw["id"],
        name=node.get("name") or raw["name"],
        full_name=raw["full_name"],
        owner=owner.get("login", raw["full_name"].split("/")[0]),
        owner_avatar=owner.get("avatarUrl") or "",
        description=node.get("description") or None,
        stars=format_number(node.get("stargazerCount", 0)),
        forks=format_number(node.get("forkCount", 0)),
        issues_count=format_number(open_issues.get("totalCount", 0)),
        pull_requests=format_number((node.get("pullRequests") or {}).get("totalCount", 0)),
        language=language.get("name"),
        topics=topics,
        homepage=node.get("homepageUrl") or None,
        license=license_info.get("name"),
        size=node.get("diskUsage") or raw.get("size", 0),
        default_branch=branch.get("name") or "main",
        created_at=node.get("createdAt"),
        updated_at=node.get("updatedAt"),
        contributors=map_contributors(users),
        issues=issues,
        readme=readme_blob.get("text") or "",
    )
