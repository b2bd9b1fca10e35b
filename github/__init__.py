# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import enum
import logging
import os

import cachecontrol
import github3
import github3.session

import http_requests

logger = logging.getLogger(__name__)


class SessionAdapter(enum.Enum):
    NONE = None
    RETRY = 'retry'
    CACHE = 'cache'


def host_org_and_repo(
    repo_url: str=None,
) -> tuple[str, str, str]:
    '''
    returns a three-tuple of `host`, `org`, `repo`. If repo_url is passed, it is assumed point to
    a github-hosted repository (it may or may not have a schema). Otherwise, fallback to
    environment variables GITHUB_SERVER_URL, GITHUB_REPOSITORY, as set for GitHub-Actions-runs
    is done.
    '''
    if repo_url:
        if '://' in repo_url:
            repo_url = repo_url.split('://')[-1]
        repo_url = repo_url.removesuffix('.git')
        host, org, repo = repo_url.strip('/').split('/')
    else:
        host = os.environ.get('GITHUB_SERVER_URL', 'https://github.com').split('://')[-1]
        org, repo = os.environ['GITHUB_REPOSITORY'].split('/')

    return host, org, repo


def _session(session_adapter: SessionAdapter) -> github3.session.GitHubSession:
    session = github3.session.GitHubSession()

    if session_adapter is SessionAdapter.NONE:
        return session
    if session_adapter is SessionAdapter.RETRY:
        return http_requests.mount_default_adapter(
            session=session,
            flags=http_requests.AdapterFlag.RETRY,
        )
    if session_adapter is SessionAdapter.CACHE:
        return cachecontrol.CacheControl(
            session,
            cache_etags=True,
        )

    raise NotImplementedError(session_adapter)


def github_api(
    repo_url: str=None,
    token: str=None,
    session_adapter: SessionAdapter=SessionAdapter.RETRY,
) -> github3.GitHub:
    '''
    returns an initialised github-api instance for the host the given repository is hosted on,
    honouring some environment variables typically present for GitHub-Actions-runs.

    If no token is passed (and `GITHUB_TOKEN` is not set), an anonymous client is returned (note
    that anonymous clients are subject to much stricter rate-limits, and cannot see drafts).
    '''
    host, _, _ = host_org_and_repo(
        repo_url=repo_url,
    )

    token = token or os.environ.get('GITHUB_TOKEN')
    if not token:
        logger.warning('no github-token available - using anonymous client')

    session = _session(SessionAdapter(session_adapter))

    if host == 'github.com':
        return github3.GitHub(token=token, session=session)

    return github3.GitHubEnterprise(
        url=f'https://{host}',
        token=token,
        session=session,
    )
