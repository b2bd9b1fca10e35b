import argparse
import logging
import sys

import ci.log
import ctx
import github
import github.util
import gitutil
import relnotes.errors as rne
import relnotes.fetch as rnf

logger = logging.getLogger(__name__)


def ensure_trailing_newline(text: str) -> str:
    if not text or text.endswith('\n'):
        return text
    return f'{text}\n'


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='relnotes',
        description='creates a (markdown) changelog for a release-branch from merged pull-requests',
    )
    parser.add_argument(
        'range',
        nargs='?',
        default=None,
        help='''\
            explicit version-range (`{start}..{end}`; end defaults to branch-head). if omitted,
            the range is derived from the latest release of the given branch
        ''',
    )
    parser.add_argument(
        '--branch',
        default=None,
        help='branch to create changelog for (defaults to the worktree\'s current branch)',
    )
    parser.add_argument(
        '--label',
        default=None,
        help='only pull-requests carrying this label are considered (default: release-note)',
    )
    parser.add_argument(
        '--repo-url',
        default=None,
        help='github-repo-url ({host}/{org}/{repo}). derived from GitHubActions-Env-Vars by default',
    )
    parser.add_argument(
        '--github-auth-token',
        default=None,
        help='the github-auth-token to use (defaults to GITHUB_TOKEN)',
    )
    parser.add_argument(
        '--repo-worktree',
        default=None,
        help='path to repository\'s worktree (defaults to cwd)',
    )
    parser.add_argument(
        '--remote',
        default=None,
        help='name of git-remote branch-heads are read from (default: origin)',
    )
    parser.add_argument(
        '--changelog',
        dest='changelog_path',
        default=None,
        help='path to CHANGELOG.md; entries of included releases are aggregated for majors',
    )
    parser.add_argument(
        '--draft-url',
        dest='draft_url_template',
        default=None,
        help='url of release-notes draft for majors; may contain {major_minor} and {end_tag}',
    )
    parser.add_argument(
        '--commit-source',
        choices=('git', 'github'),
        default=None,
        help='where to read commits from (default: git)',
    )
    parser.add_argument(
        '--issue-source',
        choices=('list', 'search'),
        default=None,
        help='''\
            how to retrieve pull requests: list all issues, or search for merged, labelled pull
            requests within the range's commit-dates (default: list)
        ''',
    )
    parser.add_argument(
        '--markdown-file',
        default='-',
        help='output file to write to (`-` for stdout, which is the default)',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        default=False,
    )

    return parser.parse_args(argv)


def cfg_from_args(parsed) -> ctx.GlobalConfig:
    github_cfg = ctx.GithubCfg(token=parsed.github_auth_token)
    if parsed.repo_url:
        host, org, repo = github.host_org_and_repo(repo_url=parsed.repo_url)
        github_cfg.hostname = host
        github_cfg.owner = org
        github_cfg.repo = repo

    return ctx.GlobalConfig(
        github=github_cfg,
        relnotes=ctx.RelnotesCfg(
            branch=parsed.branch,
            label=parsed.label,
            repo_path=parsed.repo_worktree,
            remote=parsed.remote,
            changelog_path=parsed.changelog_path,
            draft_url_template=parsed.draft_url_template,
            commit_source=parsed.commit_source,
            issue_source=parsed.issue_source,
        ),
    )


def write_markdown(markdown: str, path: str):
    markdown = ensure_trailing_newline(markdown)

    if path == '-':
        sys.stdout.write(markdown)
        return

    with open(path, 'w') as f:
        f.write(markdown)
    logger.info(f'wrote changelog to {path}')


def run(parsed) -> int:
    cfg = ctx.load_config(cfg_from_args(parsed))

    if not cfg.github.repo_url:
        raise rne.RelnotesError(
            'github-repository unknown - pass --repo-url, or set GITHUB_REPOSITORY'
        )

    git_helper = gitutil.GitHelper(
        repo=cfg.relnotes.repo_path,
        remote=cfg.relnotes.remote or 'origin',
    )

    github_api = github.github_api(
        repo_url=cfg.github.repo_url,
        token=cfg.github.token,
    )
    repository_helper = github.util.RepositoryHelper(
        owner=cfg.github.owner,
        name=cfg.github.repo,
        github_api=github_api,
    )

    changelog = rnf.generate_changelog(
        cfg=cfg,
        repository_helper=repository_helper,
        git_helper=git_helper,
        user_range=parsed.range,
    )

    write_markdown(changelog.as_markdown(), parsed.markdown_file)
    return 0


def main(argv=None):
    parsed = parse_args(argv)

    ci.log.configure_default_logging(
        stdout_level=logging.DEBUG if parsed.verbose else logging.INFO,
    )

    try:
        return run(parsed)
    except rne.RelnotesError as rele:
        if parsed.verbose:
            logger.exception(rele)
        else:
            logger.error(f'{type(rele).__name__}: {rele}')
        sys.exit(1)


if __name__ == '__main__':
    main()
