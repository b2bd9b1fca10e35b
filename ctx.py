# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
Configuration for changelog-creation. Assembled from (in ascending precedence) built-in
defaults, the user's `~/.relnotes.cfg` (YAML), environment-variables, and command-line-arguments.
The resulting `GlobalConfig` is passed explicitly to consumers.
'''

import dataclasses
import logging
import os

import dacite
import yaml

import relnotes.model as rnm

logger = logging.getLogger(__name__)

USER_CFG_FILE_NAME = '.relnotes.cfg'


@dataclasses.dataclass
class GithubCfg:
    hostname: str | None = None
    owner: str | None = None
    repo: str | None = None
    token: str | None = None

    @property
    def repo_url(self) -> str | None:
        if not (self.owner and self.repo):
            return None
        return f'{self.hostname or "github.com"}/{self.owner}/{self.repo}'


@dataclasses.dataclass
class RelnotesCfg:
    branch: str | None = None
    label: str | None = None
    repo_path: str | None = None
    remote: str | None = None
    changelog_path: str | None = None
    # placeholders: {major_minor}, {end_tag}
    draft_url_template: str | None = None
    commit_source: str | None = None
    # list: all issues of the repository, search: merged, labelled pull requests of the range
    issue_source: str | None = None


@dataclasses.dataclass
class GlobalConfig:
    github: GithubCfg = dataclasses.field(default_factory=GithubCfg)
    relnotes: RelnotesCfg = dataclasses.field(default_factory=RelnotesCfg)


def default_config() -> GlobalConfig:
    return GlobalConfig(
        github=GithubCfg(hostname='github.com'),
        relnotes=RelnotesCfg(
            label=rnm.DEFAULT_LABEL,
            repo_path=os.getcwd(),
            remote='origin',
            commit_source='git',
            issue_source='list',
        ),
    )


def merge_cfgs(ctor, left, right):
    if not left or not right:
        return left or right # nothing to merge

    # do not overwrite existing values w/ None
    right_dict = {k: v for k, v in dataclasses.asdict(right).items() if v is not None}

    return dacite.from_dict(
        data_class=ctor,
        data=dataclasses.asdict(left) | right_dict,
    )


def merge_global_cfg(left: GlobalConfig, right: GlobalConfig | None) -> GlobalConfig:
    if not right:
        return left

    return GlobalConfig(
        github=merge_cfgs(GithubCfg, left.github, right.github),
        relnotes=merge_cfgs(RelnotesCfg, left.relnotes, right.relnotes),
    )


def config_from_env(env=None) -> GlobalConfig:
    if env is None:
        env = os.environ

    owner = repo = None
    if (repository := env.get('GITHUB_REPOSITORY')):
        owner, _, repo = repository.partition('/')

    hostname = None
    if (server_url := env.get('GITHUB_SERVER_URL')):
        hostname = server_url.split('://')[-1].strip('/')

    return GlobalConfig(
        github=GithubCfg(
            hostname=hostname,
            owner=owner or None,
            repo=repo or None,
            token=env.get('GITHUB_TOKEN'),
        ),
        relnotes=RelnotesCfg(
            branch=env.get('RELNOTES_BRANCH'),
            label=env.get('RELNOTES_LABEL'),
        ),
    )


def config_from_file(path: str) -> GlobalConfig | None:
    if not os.path.isfile(path):
        return None

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    logger.debug(f'read configuration from {path}')

    return dacite.from_dict(
        data_class=GlobalConfig,
        data=raw,
    )


def config_from_user_home() -> GlobalConfig | None:
    return config_from_file(os.path.join(os.path.expanduser('~'), USER_CFG_FILE_NAME))


def load_config(*additional_cfgs: GlobalConfig | None) -> GlobalConfig:
    '''
    returns the effective configuration. `additional_cfgs` (e.g. derived from parsed
    command-line-arguments) take precedence over all other sources, in the order passed.
    '''
    cfg = default_config()

    for additional_cfg in (
        config_from_user_home(),
        config_from_env(),
        *additional_cfgs,
    ):
        cfg = merge_global_cfg(cfg, additional_cfg)

    return cfg
