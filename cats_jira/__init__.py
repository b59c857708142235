"""Report CATS test failures to Jira."""
