# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import collections.abc
import datetime
import logging

import github3
import github3.issues
import github3.repos
from github3.exceptions import NotFoundError

import relnotes.errors as rne
import relnotes.model as rnm

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str | datetime.datetime) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(value.replace('Z', '+00:00'))


def issue_from_github(
    issue: github3.issues.ShortIssue,
) -> rnm.Issue:
    labels = frozenset(label.name for label in (issue.original_labels or ()))
    author = issue.user.login if issue.user else None

    return rnm.Issue(
        number=issue.number,
        title=issue.title,
        body=issue.body,
        author=author,
        labels=labels,
    )


def add_query(
    query: list[str],
    *query_parts: str,
) -> list[str]:
    '''
    returns the given query (a list of `qualifier:value` search-terms) extended by a term
    formed from the given parts (the first part being the qualifier, all others are joined to
    form the value). If there are not enough parts, or any part is empty, the query is returned
    unchanged.
    '''
    if len(query_parts) < 2:
        logger.warning(f'not enough parts to form a query: {query_parts}')
        return query

    if not all(query_parts):
        return query

    qualifier, *value = query_parts
    return [*query, f'{qualifier}:{"".join(value)}']


def release_note_query(
    owner: str,
    repo: str,
    label: str,
    start_date: str | None=None,
    end_date: str | None=None,
) -> str:
    '''
    returns a search-query for merged pull requests labelled with the given label (optionally
    restricted to a merge-date-window: after `start_date`, up to and including `end_date`)
    '''
    query = add_query([], 'repo', owner, '/', repo)
    query = add_query(query, 'label', label)
    query = add_query(query, 'is', 'merged')
    query = add_query(query, 'type', 'pr')
    query = add_query(query, 'merged', '>', start_date)
    query = add_query(query, 'merged', '<=', end_date)

    return ' '.join(query)


class RepositoryHelper:
    '''
    read-only access to the GitHub-hosted repository changelogs are created for. All returned
    objects are converted into relnotes' model-classes.
    '''
    def __init__(
        self,
        owner: str,
        name: str,
        github_api: github3.GitHub=None,
    ):
        if not github_api:
            raise ValueError('must pass github_api')

        self.github = github_api
        self.owner = owner
        self.repository_name = name

        with rne.collaborator_call(stage='lookup-repository', identifier=f'{owner}/{name}'):
            self.repository: github3.repos.Repository = self.github.repository(
                owner=owner,
                repository=name,
            )

        if not self.repository:
            raise rne.CollaboratorFailure(
                stage='lookup-repository',
                identifier=f'{owner}/{name}',
                reason='repository not found',
            )

    @property
    def project(self) -> str:
        return f'{self.owner}/{self.repository_name}'

    def list_releases(self) -> list[rnm.Release]:
        '''
        returns all releases (including drafts, if the client is authorised to see them), in the
        order returned by GitHub (newest-first)
        '''
        with rne.collaborator_call(stage='list-releases', identifier=self.project):
            return [
                rnm.Release(
                    tag=release.tag_name,
                    is_draft=bool(release.draft),
                    is_prerelease=bool(release.prerelease),
                )
                for release in self.repository.releases(number=-1)
                if release.tag_name
            ]

    def list_issues(self, state: str='all') -> list[rnm.Issue]:
        '''
        returns issues _and_ pull requests (which GitHub considers to be issues, too)
        '''
        with rne.collaborator_call(stage='list-issues', identifier=self.project):
            return [
                issue_from_github(issue)
                for issue in self.repository.issues(state=state, number=-1)
            ]

    def search_issues(
        self,
        query: str,
        sort: str='created',
        order: str='desc',
    ) -> list[rnm.Issue]:
        '''
        note: GitHub's search-API has a tight rate-limit. prefer `list_issues` for large
        result-sets
        '''
        logger.info(f'searching issues: {query=}')
        with rne.collaborator_call(stage='search-issues', identifier=query):
            return [
                issue_from_github(result.issue)
                for result in self.github.search_issues(
                    query=query,
                    sort=sort,
                    order=order,
                    number=-1,
                )
            ]

    def list_tags(self) -> dict[str, str]:
        '''
        returns a mapping of tag-names to commit-digests
        '''
        with rne.collaborator_call(stage='list-tags', identifier=self.project):
            return {
                tag.name: tag.commit.sha
                for tag in self.repository.tags(number=-1)
            }

    def commit_date(
        self,
        tag_or_commit: str,
        tags: collections.abc.Mapping[str, str] | None=None,
    ) -> datetime.datetime:
        '''
        returns the commit-date for the given tag or commit. If `tags` (see `list_tags`) is passed,
        tag-names are resolved into commit-digests beforehand.
        '''
        ref = (tags or {}).get(tag_or_commit, tag_or_commit)

        with rne.collaborator_call(stage='lookup-commit', identifier=tag_or_commit):
            try:
                commit = self.repository.commit(ref)
            except NotFoundError:
                commit = None

            if not commit:
                raise rne.CollaboratorFailure(
                    stage='lookup-commit',
                    identifier=tag_or_commit,
                    reason='no such tag or commit',
                )

            return _parse_timestamp(commit.commit.committer['date'])

    def list_commits(
        self,
        branch: str,
        since: datetime.datetime | None=None,
        until: datetime.datetime | None=None,
    ) -> list[rnm.Commit]:
        with rne.collaborator_call(stage='list-commits', identifier=branch):
            return [
                rnm.Commit(
                    hash=commit.sha,
                    message=commit.commit.message,
                )
                for commit in self.repository.commits(
                    sha=branch,
                    since=since,
                    until=until,
                    number=-1,
                )
            ]
