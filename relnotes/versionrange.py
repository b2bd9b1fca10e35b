import collections.abc
import dataclasses
import logging
import re

import relnotes.errors as rne
import relnotes.model as rnm

logger = logging.getLogger(__name__)


_tag = r'[v0-9.]*(?:-(?:alpha|beta|rc)[0-9.]*)?'
_range_pattern = re.compile(rf'(?P<start>{_tag})\.\.(?P<end>{_tag})')


@dataclasses.dataclass(frozen=True)
class RangeExpression:
    '''
    a (possibly partial) user-supplied range `[start]..[end]`. Either side may be empty.
    '''
    start: str
    end: str


def parse_range(expression: str | None) -> RangeExpression | None:
    '''
    parses a two-sided range expression of version-like tags (`v1.2.3..v1.2.7`,
    `v1.8.0-alpha.1..`). Returns `None` if the expression is not of this form (in which case
    callers should treat the whole expression as end-tag).
    '''
    if not expression:
        return None

    if not (match := _range_pattern.fullmatch(expression.strip())):
        return None

    return RangeExpression(
        start=match.group('start'),
        end=match.group('end'),
    )


def parent_branch(branch: str) -> str | None:
    '''
    returns the given branch w/ its last `.`-separated segment stripped, or `None` if there is
    no such segment (`release-1.7.3` -> `release-1.7`)
    '''
    if '.' not in branch:
        return None
    return branch.rsplit('.', 1)[0]


def last_release(
    branch: str,
    release_index: collections.abc.Mapping[str, str],
) -> str | None:
    '''
    looks up the last release for the given branch. If there was no release from this branch
    (yet), the parent branch's last release is used, and then the one from `master`.
    '''
    if (tag := release_index.get(branch)):
        return tag

    if (parent := parent_branch(branch)) and (tag := release_index.get(parent)):
        logger.info(f'no release for {branch=} - falling back to parent branch {parent}')
        return tag

    if (tag := release_index.get(rnm.MASTER_BRANCH)):
        logger.info(f'no release for {branch=} - falling back to {rnm.MASTER_BRANCH}')
        return tag

    return None


def resolve(
    branch: str,
    user_range: str | None,
    release_index: collections.abc.Mapping[str, str],
    branch_head: str,
) -> rnm.VersionRange:
    '''
    determines the effective range to collect changes for.

    `user_range` is interpreted as `start..end`, or, if it is not of this form, as end-tag
    (empty string / None meaning "up to branch head"). If no start is given, the last release
    of the given branch (see `last_release`) is used as start.

    raises `RangeUnresolvable` if no start could be determined.
    '''
    user_range = (user_range or '').strip()

    if (expression := parse_range(user_range)):
        start = expression.start
        end = expression.end
    else:
        start = last_release(branch=branch, release_index=release_index)
        end = user_range

    if not start:
        raise rne.RangeUnresolvable(branch=branch, user_range=user_range)

    if not end:
        end = branch_head

    pretty_range = user_range or f'{start}..{branch_head}'
    logger.info(f'pretty range: {pretty_range}')
    logger.info(f'start: {start}')
    logger.info(f'release: {end}')

    return rnm.VersionRange(start=start, end=end)
