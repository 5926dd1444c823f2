"""Path templates for the Bitbucket Cloud 2.0 pull-request endpoints.

All paths are relative to the API base URL and are formatted with
``owner``, ``slug``, ``pr_id`` and ``comment_id``.
"""

CURRENT_USER = "/user"

PULL_REQUESTS = "/repositories/{owner}/{slug}/pullrequests"
PULL_REQUESTS_ACTIVITY = "/repositories/{owner}/{slug}/pullrequests/activity"

PULL_REQUEST = "/repositories/{owner}/{slug}/pullrequests/{pr_id}"
PULL_REQUEST_ACTIVITY = PULL_REQUEST + "/activity"
PULL_REQUEST_COMMENTS = PULL_REQUEST + "/comments"
PULL_REQUEST_COMMENT = PULL_REQUEST + "/comments/{comment_id}"
PULL_REQUEST_COMMITS = PULL_REQUEST + "/commits"
PULL_REQUEST_DIFF = PULL_REQUEST + "/diff"
PULL_REQUEST_PATCH = PULL_REQUEST + "/patch"
PULL_REQUEST_APPROVE = PULL_REQUEST + "/approve"
PULL_REQUEST_DECLINE = PULL_REQUEST + "/decline"
PULL_REQUEST_MERGE = PULL_REQUEST + "/merge"
