"""Per-repository number allocation for issues and pull requests.

A ``read MAX(number), add one, insert`` sequence races: two creators can read
the same maximum and pick the same number. Numbers are instead reserved by
bumping a counter row with a single ``UPDATE ... SET last_number =
last_number + 1``. The write lock taken by that statement is held until the
caller's transaction ends, so concurrent creators for the same
``(repository, kind)`` queue behind each other and each sees the previous
creator's committed value.

The unique ``(repository_id, number)`` constraints on ``issues`` and
``pull_requests`` remain the final backstop.
"""

from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from devit.models.issue import Issue
from devit.models.pull_request import PullRequest
from devit.models.repository import RepositorySequence, SequenceKind
from devit.repositories.base import BaseRepository
from devit.services._shared.errors import ConflictError

# Table whose MAX(number) seeds or resynchronises each counter
_NUMBERED_MODELS: dict[SequenceKind, type[Issue] | type[PullRequest]] = {
    SequenceKind.ISSUE: Issue,
    SequenceKind.PULL_REQUEST: PullRequest,
}


class SequenceRepository(BaseRepository[RepositorySequence]):
    """Counter rows keyed by ``(repository_id, kind)``.

    Must run inside the caller's transaction: the reservation only holds while
    that transaction is open, and it is released (and the number given back)
    on rollback.
    """

    model = RepositorySequence

    def _pk_attr(self):
        return None

    def current_max(self, repository_id: int, kind: SequenceKind | str) -> int:
        """Return the highest number already used for ``kind`` (0 when none)."""
        target = _NUMBERED_MODELS[SequenceKind(kind)]
        stmt = select(func.coalesce(func.max(target.number), 0)).where(
            target.repository_id == repository_id
        )
        return int(self.session.execute(stmt).scalar_one())

    def seed(self, repository_id: int) -> None:
        """Create zeroed counters for every kind of a brand-new repository."""
        for kind in SequenceKind:
            self.session.add(
                RepositorySequence(repository_id=repository_id, kind=kind.value, last_number=0)
            )
        self.flush()

    def reserve_next_number(
        self,
        repository_id: int,
        kind: SequenceKind | str,
        *,
        resync: bool = False,
    ) -> int:
        """Atomically reserve and return the next number for ``(repository_id, kind)``.

        :param repository_id: Repository the number belongs to.
        :type repository_id: int
        :param kind: Which sequence to draw from (issues and pull requests are independent).
        :type kind: SequenceKind | str
        :param resync: First raise the counter to the current ``MAX(number)``.
            Used when retrying after a collision with a row the counter did not
            know about.
        :type resync: bool
        :returns: A number no other open or committed transaction holds.
        :rtype: int
        :raises ConflictError: When a concurrent creator seeded the counter first.
        """
        kind = SequenceKind(kind)
        key = (
            RepositorySequence.repository_id == repository_id,
            RepositorySequence.kind == kind.value,
        )

        if resync:
            floor = self.current_max(repository_id, kind)
            self.session.execute(
                update(RepositorySequence)
                .where(*key, RepositorySequence.last_number < floor)
                .values(last_number=floor)
                .execution_options(synchronize_session=False)
            )

        bumped = self.session.execute(
            update(RepositorySequence)
            .where(*key)
            .values(last_number=RepositorySequence.last_number + 1)
            .execution_options(synchronize_session=False)
        )
        if bumped.rowcount == 0:
            return self._seed_counter(repository_id, kind)

        stmt = select(RepositorySequence.last_number).where(*key)
        return int(self.session.execute(stmt).scalar_one())

    def _seed_counter(self, repository_id: int, kind: SequenceKind) -> int:
        """Create the missing counter, continuing after any existing rows."""
        number = self.current_max(repository_id, kind) + 1
        self.session.add(
            RepositorySequence(repository_id=repository_id, kind=kind.value, last_number=number)
        )
        try:
            self.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "RepositorySequence", f"{kind.value} counter of repository {repository_id}"
            ) from exc
        return number
