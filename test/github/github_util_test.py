# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import datetime
import types
import unittest.mock

import pytest
from github3.exceptions import NotFoundError

import github
import github.util as ghu
import relnotes.errors as rne
import relnotes.model as rnm


# test gear
def gh_issue(number, title, body=None, labels=(), login='foo'):
    return types.SimpleNamespace(
        number=number,
        title=title,
        body=body,
        user=types.SimpleNamespace(login=login) if login else None,
        original_labels=[types.SimpleNamespace(name=label) for label in labels],
    )


@pytest.fixture
def repository():
    return unittest.mock.MagicMock()


@pytest.fixture
def repository_helper(repository):
    github_api = unittest.mock.MagicMock()
    github_api.repository.return_value = repository

    return ghu.RepositoryHelper(
        owner='gardener',
        name='gardener',
        github_api=github_api,
    )


def test_host_org_and_repo():
    assert github.host_org_and_repo('github.com/gardener/gardener') == \
        ('github.com', 'gardener', 'gardener')
    assert github.host_org_and_repo('https://github.example.com/org/repo.git') == \
        ('github.example.com', 'org', 'repo')


def test_add_query():
    query = ghu.add_query([], 'repo', 'gardener', '/', 'gardener')
    assert query == ['repo:gardener/gardener']

    # incomplete parts are ignored
    assert ghu.add_query(query, 'merged', '>', None) == query
    assert ghu.add_query(query, 'is') == query

    # passed query is not modified
    ghu.add_query(query, 'is', 'merged')
    assert query == ['repo:gardener/gardener']


def test_release_note_query():
    assert ghu.release_note_query(
        owner='gardener',
        repo='gardener',
        label='release-note',
        start_date='2024-01-01',
    ) == (
        'repo:gardener/gardener label:release-note is:merged type:pr merged:>2024-01-01'
    )

    assert ghu.release_note_query(
        owner='gardener',
        repo='gardener',
        label='release-note',
        start_date='2024-01-01',
        end_date='2024-02-01',
    ).endswith('merged:>2024-01-01 merged:<=2024-02-01')


def test_issue_from_github():
    issue = ghu.issue_from_github(gh_issue(
        number=42,
        title='title',
        body='body',
        labels=('release-note', 'kind/bug'),
    ))

    assert issue == rnm.Issue(
        number=42,
        title='title',
        body='body',
        author='foo',
        labels=frozenset(('release-note', 'kind/bug')),
    )
    assert ghu.issue_from_github(gh_issue(1, 'x', login=None)).author is None


def test_repository_helper_requires_api():
    with pytest.raises(ValueError):
        ghu.RepositoryHelper(owner='gardener', name='gardener', github_api=None)


def test_repository_not_found():
    github_api = unittest.mock.MagicMock()
    github_api.repository.return_value = None

    with pytest.raises(rne.CollaboratorFailure) as exc_info:
        ghu.RepositoryHelper(owner='gardener', name='gardener', github_api=github_api)

    assert exc_info.value.stage == 'lookup-repository'


def test_list_releases(repository_helper, repository):
    repository.releases.return_value = [
        types.SimpleNamespace(tag_name='v1.8.0', draft=False, prerelease=False),
        types.SimpleNamespace(tag_name='v1.9.0', draft=True, prerelease=False),
        types.SimpleNamespace(tag_name=None, draft=True, prerelease=False),
    ]

    assert repository_helper.list_releases() == [
        rnm.Release(tag='v1.8.0'),
        rnm.Release(tag='v1.9.0', is_draft=True),
    ]
    repository.releases.assert_called_once_with(number=-1)


def test_list_releases_failure(repository_helper, repository):
    repository.releases.side_effect = ConnectionError('unreachable')

    with pytest.raises(rne.CollaboratorFailure) as exc_info:
        repository_helper.list_releases()

    assert exc_info.value.stage == 'list-releases'
    assert exc_info.value.identifier == 'gardener/gardener'


def test_list_issues(repository_helper, repository):
    repository.issues.return_value = [gh_issue(1, 'one'), gh_issue(2, 'two')]

    issues = repository_helper.list_issues()

    assert [issue.number for issue in issues] == [1, 2]
    repository.issues.assert_called_once_with(state='all', number=-1)


def test_search_issues(repository_helper):
    repository_helper.github.search_issues.return_value = [
        types.SimpleNamespace(issue=gh_issue(3, 'three')),
    ]

    issues = repository_helper.search_issues(query='repo:gardener/gardener')

    assert [issue.number for issue in issues] == [3]


def test_commit_date(repository_helper, repository):
    repository.commit.return_value = types.SimpleNamespace(
        commit=types.SimpleNamespace(committer={'date': '2024-01-02T03:04:05Z'}),
    )

    date = repository_helper.commit_date('v1.7.0', tags={'v1.7.0': 'abcdef'})

    assert date == datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)
    repository.commit.assert_called_once_with('abcdef')


def test_commit_date_unknown_ref(repository_helper, repository):
    repository.commit.side_effect = NotFoundError(unittest.mock.MagicMock(status_code=404))

    with pytest.raises(rne.CollaboratorFailure) as exc_info:
        repository_helper.commit_date('v0.0.0')

    assert exc_info.value.reason == 'no such tag or commit'


def test_list_tags_and_commits(repository_helper, repository):
    repository.tags.return_value = [
        types.SimpleNamespace(name='v1.7.0', commit=types.SimpleNamespace(sha='aaaa')),
    ]
    repository.commits.return_value = [
        types.SimpleNamespace(sha='bbbb', commit=types.SimpleNamespace(message='msg')),
    ]

    assert repository_helper.list_tags() == {'v1.7.0': 'aaaa'}
    assert repository_helper.list_commits(branch='master') == [
        rnm.Commit(hash='bbbb', message='msg'),
    ]
