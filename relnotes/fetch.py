import collections.abc
import datetime
import logging
import os

import ctx
import github.util
import relnotes.assemble as rna
import relnotes.commits as rnc
import relnotes.draft as rnd
import relnotes.errors as rne
import relnotes.index as rni
import relnotes.model as rnm
import relnotes.notes as rnn
import relnotes.versionrange as rnv
import version

logger = logging.getLogger(__name__)


DraftFetcher = collections.abc.Callable[[str], str | None]


def _read_changelog(path: str | None) -> str | None:
    if not path:
        return None

    if not os.path.isfile(path):
        logger.warning(f'changelog-document {path} does not exist - will not aggregate entries')
        return None

    with rne.collaborator_call(stage='read-changelog', identifier=path):
        with open(path) as f:
            return f.read()


def _draft_text(
    cfg: ctx.RelnotesCfg,
    version_range: rnm.VersionRange,
    draft_fetcher: DraftFetcher,
) -> str | None:
    if not cfg.draft_url_template:
        return None

    if not (url := rnd.draft_url(cfg.draft_url_template, version_range)):
        return None

    return draft_fetcher(url)


def commit_source_for(
    cfg: ctx.RelnotesCfg,
    branch: str,
    repository_helper,
    git_helper,
) -> rnc.CommitSource:
    if cfg.commit_source == 'github':
        return rnc.GithubCommitSource(repository_helper=repository_helper, branch=branch)
    if cfg.commit_source in (None, 'git'):
        return rnc.GitCommitSource(git_helper=git_helper)

    raise ValueError(f'unknown commit-source: {cfg.commit_source}')


def _search_date(date: datetime.datetime) -> str:
    return date.astimezone(datetime.timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def _commit_date(
    cfg: ctx.RelnotesCfg,
    ref: str,
    repository_helper,
    git_helper,
) -> datetime.datetime:
    if cfg.commit_source == 'github':
        return repository_helper.commit_date(ref)
    return git_helper.commit_date(ref)


def list_issues(
    cfg: ctx.RelnotesCfg,
    label: str,
    version_range: rnm.VersionRange,
    repository_helper,
    git_helper,
) -> dict[int, rnm.Issue]:
    '''
    returns the issues (incl. pull requests) to correlate pull request numbers with, by number.

    With issue-source `list` (default), all issues of the repository are retrieved. With
    `search`, only merged pull requests carrying `label` that were merged within the range's
    commit-dates are searched for.
    '''
    if cfg.issue_source in (None, 'list'):
        issues = repository_helper.list_issues()
    elif cfg.issue_source == 'search':
        query = github.util.release_note_query(
            owner=repository_helper.owner,
            repo=repository_helper.repository_name,
            label=label,
            start_date=_search_date(_commit_date(
                cfg=cfg,
                ref=version_range.start,
                repository_helper=repository_helper,
                git_helper=git_helper,
            )),
            end_date=_search_date(_commit_date(
                cfg=cfg,
                ref=version_range.end,
                repository_helper=repository_helper,
                git_helper=git_helper,
            )),
        )
        issues = repository_helper.search_issues(query=query)
    else:
        raise ValueError(f'unknown issue-source: {cfg.issue_source}')

    logger.info(f'retrieved {len(issues)} issues ({cfg.issue_source=})')
    return {issue.number: issue for issue in issues}


def generate_changelog(
    cfg: ctx.GlobalConfig,
    repository_helper,
    git_helper,
    user_range: str | None=None,
    commit_source: rnc.CommitSource | None=None,
    draft_fetcher: DraftFetcher=rnd.fetch_draft,
) -> rnm.Changelog:
    '''
    creates the changelog for the configured branch (defaulting to the worktree's current
    branch).

    `repository_helper` (see `github.util.RepositoryHelper`) is used to retrieve releases and
    issues / pull requests; `git_helper` (see `gitutil.GitHelper`) to determine the branch-head
    and to validate the resulting range. Unless `commit_source` is passed, commits are
    retrieved according to the configured commit-source.
    '''
    relnotes_cfg = cfg.relnotes
    branch = relnotes_cfg.branch or git_helper.current_branch()
    label = relnotes_cfg.label or rnm.DEFAULT_LABEL
    logger.info(f'creating changelog for {branch=} ({label=})')

    releases = repository_helper.list_releases()
    release_index = rni.build_index(releases)

    branch_head = git_helper.branch_head(branch)

    version_range = rnv.resolve(
        branch=branch,
        user_range=user_range,
        release_index=release_index,
        branch_head=branch_head,
    )
    git_helper.validate_range(version_range)

    if not commit_source:
        commit_source = commit_source_for(
            cfg=relnotes_cfg,
            branch=branch,
            repository_helper=repository_helper,
            git_helper=git_helper,
        )

    commits = rnc.walk_commits(version_range=version_range, source=commit_source)
    pr_numbers = rnc.extract(commits)
    logger.info(f'pull requests in range {version_range}: {pr_numbers}')

    issues = list_issues(
        cfg=relnotes_cfg,
        label=label,
        version_range=version_range,
        repository_helper=repository_helper,
        git_helper=git_helper,
    )
    noteworthy_pr_numbers = rnn.filter_release_noteworthy(
        pr_numbers=pr_numbers,
        issues=issues,
        required_label=label,
    )

    is_major = version.classify(version_range.end, version.VersionKind.DOTZERO)

    if is_major:
        logger.info(f'{version_range.end} is a major release')
        draft_text = _draft_text(
            cfg=relnotes_cfg,
            version_range=version_range,
            draft_fetcher=draft_fetcher,
        )
        changelog_text = _read_changelog(relnotes_cfg.changelog_path)
    else:
        draft_text = changelog_text = None

    sections = rna.assemble(
        is_major=is_major,
        version_range=version_range,
        pr_numbers=noteworthy_pr_numbers,
        issues=issues,
        draft_text=draft_text,
        changelog_text=changelog_text,
    )

    return rnm.Changelog(
        version_range=version_range,
        is_major=is_major,
        pr_numbers=pr_numbers,
        release_note_prs=rnn.release_note_prs(noteworthy_pr_numbers, issues),
        sections=sections,
    )
