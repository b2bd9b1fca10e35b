# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import datetime
import logging

import git
import git.exc

import relnotes.errors as rne
import relnotes.model as rnm

logger = logging.getLogger(__name__)


class GitHelper:
    '''
    read-only helper for the local git-repository (worktree) changelogs are created from.
    All failures of underlying git-operations are raised as `CollaboratorFailure`.
    '''
    def __init__(
        self,
        repo: git.Repo | str,
        remote: str='origin',
    ):
        if repo is None:
            raise ValueError(repo)
        if isinstance(repo, str):
            with rne.collaborator_call(stage='open-repository', identifier=repo):
                repo = git.Repo(repo, search_parent_directories=True)
        if not isinstance(repo, git.Repo):
            raise ValueError(repo)

        self.repo = repo
        self.remote = remote

    def current_branch(self) -> str:
        with rne.collaborator_call(stage='determine-branch', identifier=self.repo.working_dir):
            return self.repo.active_branch.name

    def branch_head(self, branch: str) -> str:
        '''
        returns the commit-digest of the given branch's head, as known to the configured remote
        (i.e. `refs/remotes/{remote}/{branch}`); falls back to the local branch if the remote
        does not know the branch.
        '''
        remote_ref = f'refs/remotes/{self.remote}/{branch}'

        with rne.collaborator_call(stage='determine-branch-head', identifier=branch):
            try:
                return self.repo.rev_parse(remote_ref).hexsha
            except (git.exc.BadName, ValueError):
                logger.warning(f'{remote_ref} not found - falling back to local branch {branch}')

            return self.repo.rev_parse(f'refs/heads/{branch}').hexsha

    def validate_range(self, version_range: rnm.VersionRange):
        with rne.collaborator_call(stage='validate-range', identifier=str(version_range)):
            self.repo.git.rev_parse(str(version_range))

    def commit_date(self, tag_or_commit: str) -> datetime.datetime:
        with rne.collaborator_call(stage='lookup-commit', identifier=tag_or_commit):
            return self.repo.commit(tag_or_commit).committed_datetime

    def iter_commits(self, version_range: rnm.VersionRange):
        '''
        yields the commits reachable from the range's end, but not from its start (newest-first)
        '''
        for commit in self.repo.iter_commits(str(version_range)):
            commit: git.Commit
            yield rnm.Commit(
                hash=commit.hexsha,
                message=commit.message,
            )
