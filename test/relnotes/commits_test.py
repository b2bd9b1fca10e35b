import datetime
import unittest.mock

import pytest

import relnotes.commits as rnc
import relnotes.errors as rne
import relnotes.model as rnm


def commits(*messages):
    return [
        rnm.Commit(hash=f'{idx:040x}', message=message)
        for idx, message in enumerate(messages)
    ]


def test_extract():
    assert rnc.extract(commits(
        'Merge pull request #100 from x',
        'automated-cherry-pick-of-#100-#200-',
        'Merge pull request #200 from y',
    )) == [100, 200]


def test_extract_ignores_unrelated_commits():
    assert rnc.extract(commits(
        'fix typo',
        'Merge branch \'master\' into release-1.7',
        'Revert "Merge pull request #42 from x"',
    )) == []


def test_cherry_pick_takes_precedence():
    message = (
        'Merge pull request #300 from k8s-ci-robot/automated-cherry-pick-of-#12-#34-upstream-release-1.7\n'
        '\n'
        'Automated cherry pick of #12 #34 upstream release 1.7'
    )

    assert rnc.pr_numbers_from_message(message) == [12, 34]


def test_pr_numbers_from_message():
    assert rnc.pr_numbers_from_message('Merge pull request #7 from a/b\n\nbody') == [7]
    assert rnc.pr_numbers_from_message('automated-cherry-pick-of-#5-') == [5]
    assert rnc.pr_numbers_from_message('') == []
    assert rnc.pr_numbers_from_message('see Merge pull request #7 from a/b') == []


def test_malformed_reference():
    with pytest.raises(rne.MalformedCommitReference) as exc_info:
        rnc.pr_numbers_from_message('Merge pull request #0 from x')

    assert exc_info.value.reference == '0'
    assert exc_info.value.commit_message == 'Merge pull request #0 from x'


def test_walk_commits():
    source = unittest.mock.MagicMock()
    source.commits.return_value = iter(commits('a', 'b'))
    version_range = rnm.VersionRange(start='v1.7.0', end='v1.7.1')

    result = rnc.walk_commits(version_range=version_range, source=source)

    assert [c.message for c in result] == ['a', 'b']
    source.commits.assert_called_once_with(version_range)


def test_walk_commits_wraps_failures():
    source = unittest.mock.MagicMock()
    source.commits.side_effect = OSError('connection reset')

    with pytest.raises(rne.CollaboratorFailure) as exc_info:
        rnc.walk_commits(
            version_range=rnm.VersionRange(start='v1.7.0', end='v1.7.1'),
            source=source,
        )

    assert exc_info.value.stage == 'list-commits'
    assert exc_info.value.identifier == 'v1.7.0..v1.7.1'
    assert isinstance(exc_info.value.__cause__, OSError)


def test_git_commit_source():
    git_helper = unittest.mock.MagicMock()
    git_helper.iter_commits.return_value = commits('x')
    version_range = rnm.VersionRange(start='v1.7.0', end='v1.7.1')

    source = rnc.GitCommitSource(git_helper=git_helper)

    assert list(source.commits(version_range)) == commits('x')
    git_helper.iter_commits.assert_called_once_with(version_range)


def test_github_commit_source():
    since = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    until = datetime.datetime(2024, 2, 1, tzinfo=datetime.timezone.utc)
    tags = {'v1.7.0': 'aaaa', 'v1.7.1': 'bbbb'}

    repository_helper = unittest.mock.MagicMock()
    repository_helper.list_tags.return_value = tags
    repository_helper.commit_date.side_effect = lambda ref, tags: {
        'v1.7.0': since,
        'v1.7.1': until,
    }[ref]
    repository_helper.list_commits.return_value = commits('y')

    source = rnc.GithubCommitSource(repository_helper=repository_helper, branch='release-1.7')
    result = source.commits(rnm.VersionRange(start='v1.7.0', end='v1.7.1'))

    assert result == commits('y')
    repository_helper.list_commits.assert_called_once_with(
        branch='release-1.7',
        since=since,
        until=until,
    )


def test_github_commit_source_excludes_start_commit():
    start_sha = 'a' * 40
    date = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)

    repository_helper = unittest.mock.MagicMock()
    repository_helper.list_tags.return_value = {'v1.7.0': start_sha}
    repository_helper.commit_date.return_value = date
    repository_helper.list_commits.return_value = [
        rnm.Commit(hash='b' * 40, message='Merge pull request #2 from x'),
        rnm.Commit(hash=start_sha, message='Merge pull request #1 from x'),
    ]

    source = rnc.GithubCommitSource(repository_helper=repository_helper, branch='release-1.7')
    result = source.commits(rnm.VersionRange(start='v1.7.0', end='b' * 40))

    assert [commit.hash for commit in result] == ['b' * 40]
    assert rnc.extract(result) == [2]
