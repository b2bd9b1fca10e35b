import collections.abc
import logging
import re
import typing

import relnotes.errors as rne
import relnotes.model as rnm

logger = logging.getLogger(__name__)


class CommitSource(typing.Protocol):
    def commits(self, version_range: rnm.VersionRange) -> collections.abc.Iterable[rnm.Commit]:
        ...


class GitCommitSource:
    '''
    lists commits from a local worktree (see `gitutil.GitHelper`)
    '''
    def __init__(self, git_helper):
        self.git_helper = git_helper

    def commits(self, version_range: rnm.VersionRange):
        return self.git_helper.iter_commits(version_range)


class GithubCommitSource:
    '''
    lists commits via GitHub's API (see `github.util.RepositoryHelper`). As the API only allows
    filtering by time, range-boundaries are converted into their commit-dates first. The API's
    lower bound is inclusive; the range's start commit is dropped (as for `git log start..end`).
    '''
    def __init__(self, repository_helper, branch: str):
        self.repository_helper = repository_helper
        self.branch = branch

    def commits(self, version_range: rnm.VersionRange):
        tags = self.repository_helper.list_tags()

        since = self.repository_helper.commit_date(version_range.start, tags=tags)
        until = self.repository_helper.commit_date(version_range.end, tags=tags)
        logger.info(f'listing commits on {self.branch} between {since} and {until}')

        start_ref = tags.get(version_range.start, version_range.start)

        return [
            commit for commit in self.repository_helper.list_commits(
                branch=self.branch,
                since=since,
                until=until,
            )
            if not commit.hash.startswith(start_ref)
        ]


def walk_commits(
    version_range: rnm.VersionRange,
    source: CommitSource,
) -> tuple[rnm.Commit, ...]:
    '''
    returns the commits within the given range, in the order yielded by `source` (which is
    expected to be newest-first).
    '''
    with rne.collaborator_call(stage='list-commits', identifier=str(version_range)):
        commits = tuple(source.commits(version_range))

    logger.info(f'found {len(commits)} commits in range {version_range}')
    return commits


_cherry_pick_pattern = re.compile(r'automated-cherry-pick-of-((?:#[0-9]+-)+)')
_cherry_pick_reference_pattern = re.compile(r'#([0-9]+)-')
_merge_pattern = re.compile(r'Merge pull request #([0-9]+) from')


def _to_pr_number(reference: str, message: str) -> int:
    try:
        number = int(reference)
    except ValueError as ve:
        raise rne.MalformedCommitReference(reference=reference, message=message) from ve

    if number <= 0:
        raise rne.MalformedCommitReference(reference=reference, message=message)

    return number


def pr_numbers_from_message(message: str) -> list[int]:
    '''
    returns the pull-request numbers referenced by the given commit-message.

    Automated cherry-picks (`automated-cherry-pick-of-#123-#456-<branch>`) may refer to more than
    one (original) pull request; those take precedence over the number of the merged pull
    request (`Merge pull request #789 from ...`), which is only honoured if the commit is not a
    cherry-pick.
    '''
    if not message:
        return []

    if (match := _cherry_pick_pattern.search(message)):
        return [
            _to_pr_number(reference=ref, message=message)
            for ref in _cherry_pick_reference_pattern.findall(match.group(1))
        ]

    if (match := _merge_pattern.match(message)):
        return [_to_pr_number(reference=match.group(1), message=message)]

    return []


def extract(
    commits: collections.abc.Iterable[rnm.Commit],
) -> list[int]:
    '''
    returns the (unique) numbers of the pull requests the given commits originate from, in the
    order of their first occurrence.
    '''
    pr_numbers = []
    seen = set()

    for commit in commits:
        for pr_number in pr_numbers_from_message(commit.message):
            if pr_number in seen:
                continue
            seen.add(pr_number)
            pr_numbers.append(pr_number)

    logger.debug(f'pull requests referenced by commits: {pr_numbers}')
    return pr_numbers
