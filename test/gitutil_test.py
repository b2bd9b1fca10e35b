import git
import pytest

import gitutil
import relnotes.errors as rne
import relnotes.model as rnm


@pytest.fixture
def git_repo(tmpdir):
    repo = git.Repo.init(tmpdir)

    repo.index.commit('first commit')
    repo.create_tag('v0.1.0')
    repo.index.commit('Merge pull request #1 from foo/bar')
    repo.index.commit('unrelated commit')
    repo.create_tag('v0.2.0')
    repo.index.commit('Merge pull request #2 from foo/baz')

    return repo


@pytest.fixture
def git_helper(git_repo):
    return gitutil.GitHelper(
        repo=git_repo,
    )


def test_ctor(git_repo):
    with pytest.raises(ValueError):
        gitutil.GitHelper(repo=None)

    helper = gitutil.GitHelper(repo=git_repo.working_tree_dir)
    assert helper.repo.working_tree_dir == git_repo.working_tree_dir

    with pytest.raises(rne.CollaboratorFailure):
        gitutil.GitHelper(repo='/does/not/exist')


def test_branch_head_falls_back_to_local_branch(git_helper, git_repo):
    branch = git_helper.current_branch()

    assert branch == git_repo.active_branch.name
    assert git_helper.branch_head(branch) == git_repo.head.commit.hexsha


def test_branch_head_unknown_branch(git_helper):
    with pytest.raises(rne.CollaboratorFailure) as exc_info:
        git_helper.branch_head('release-9.9')

    assert exc_info.value.stage == 'determine-branch-head'


def test_iter_commits(git_helper):
    commits = list(git_helper.iter_commits(rnm.VersionRange(start='v0.1.0', end='v0.2.0')))

    assert [c.message.split('\n')[0] for c in commits] == [
        'unrelated commit',
        'Merge pull request #1 from foo/bar',
    ]
    assert all(len(c.hash) == 40 for c in commits)


def test_validate_range(git_helper, git_repo):
    git_helper.validate_range(rnm.VersionRange(start='v0.1.0', end=git_repo.head.commit.hexsha))

    with pytest.raises(rne.CollaboratorFailure) as exc_info:
        git_helper.validate_range(rnm.VersionRange(start='v0.1.0', end='v9.9.9'))

    assert exc_info.value.stage == 'validate-range'


def test_commit_date(git_helper, git_repo):
    assert git_helper.commit_date('v0.2.0') == \
        git_repo.tags['v0.2.0'].commit.committed_datetime
