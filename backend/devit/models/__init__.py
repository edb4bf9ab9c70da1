from devit.models.account import Account, new_account_id
from devit.models.issue import Issue, IssueStatus
from devit.models.pull_request import PullRequest, PullRequestStatus
from devit.models.repository import (
    DEFAULT_BRANCH,
    Repository,
    RepositorySequence,
    SequenceKind,
)

__all__ = [
    "Account",
    "DEFAULT_BRANCH",
    "Issue",
    "IssueStatus",
    "PullRequest",
    "PullRequestStatus",
    "Repository",
    "RepositorySequence",
    "SequenceKind",
    "new_account_id",
]
