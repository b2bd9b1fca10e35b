import collections.abc
import logging
import types

import relnotes.model as rnm
import version

logger = logging.getLogger(__name__)

ALPHA_MARKER = '-alpha'


def release_branch_name(major_minor: str) -> str:
    return f'{rnm.RELEASE_BRANCH_PREFIX}{major_minor}'


def build_index(
    releases: collections.abc.Iterable[rnm.Release],
    presorted: bool=False,
) -> collections.abc.Mapping[str, str]:
    '''
    returns a (read-only) mapping of branch-name to the last release (tag-name) that was
    published from this branch.

    Releases are processed newest-first. Unless `presorted` is set, releases are explicitly
    sorted (by semver, descending) beforehand, rather than relying on the order in which they
    were returned from GitHub. Each branch is assigned at most once (first seen wins).

    - draft releases are ignored
    - alpha releases only go to `master` (the newest one, if no other release was seen before)
    - the newest {major}.{minor}.0 release goes to both `master` and `release-{major}.{minor}`
    - any other release goes to its `release-{major}.{minor}` branch
    '''
    if not presorted:
        releases = version.sort_newest_first(
            releases,
            converter=lambda release: release.tag,
        )

    index = {}

    for release in releases:
        if release.is_draft:
            logger.debug(f'skipping draft-release {release.tag}')
            continue

        tag = release.tag

        if ALPHA_MARKER in tag:
            if rnm.MASTER_BRANCH not in index:
                index[rnm.MASTER_BRANCH] = tag
            continue

        if not (parsed := version.major_minor_and_patch(tag)):
            logger.debug(f'skipping release w/ non-release tag {tag}')
            continue

        major_minor, patch = parsed

        if patch == '0':
            index.setdefault(rnm.MASTER_BRANCH, tag)

        index.setdefault(release_branch_name(major_minor), tag)

    logger.debug(f'last releases per branch: {index}')

    return types.MappingProxyType(index)
