"""JQL construction for the unresolved-issue search."""

# Custom fields that must be added to Jira for CATS.
CATS_REPOSITORY = "CATS Repository"
CATS_BRANCH = "CATS Branch"
CATS_COMMIT = "CATS Commit"
CATS_HASH = "CATS Hash"


def contains_exact(field_name: str, value: str) -> str:
    """Exact phrase match on a text field.

    Text fields only support "contains" (~); quoting the value again makes it a
    phrase, so the JQL reads "foo"~"\\"bar\\"".
    """
    return f'"{field_name}"~"\\"{value}\\""'


def build_unresolved_query(
    project: str,
    role: str,
    issue_type: str,
    repository: str | None = None,
    branch: str | None = None,
) -> str:
    """Unresolved issues of one type in a project, held by the current user.

    Blank repository or branch values add no clause.
    """
    clauses = [
        f'project="{project}"',
        f"{role}=currentUser()",
        f'issuetype="{issue_type}"',
        'resolution="unresolved"',
    ]
    if repository and repository.strip():
        clauses.append(contains_exact(CATS_REPOSITORY, repository))
    if branch and branch.strip():
        clauses.append(contains_exact(CATS_BRANCH, branch))
    return " and ".join(clauses)
