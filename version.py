# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import enum
import logging
import re
import typing

import semver

logger = logging.getLogger(__name__)


class VersionKind(enum.StrEnum):
    RELEASE = 'release'
    DOTZERO = 'dotzero'
    BUILD = 'build'


_numeric = r'(0|[1-9][0-9]*)'

# the trailing counter may also directly follow the patch-level (v1.8.01, v1.8.1.2 match)
_release_pattern = re.compile(
    rf'v{_numeric}\.{_numeric}\.{_numeric}(-[a-zA-Z0-9]+)*\.?{_numeric}?'
)
_dotzero_pattern = re.compile(rf'v{_numeric}\.{_numeric}\.0')
# e.g. v1.8.0-alpha.2.123+0123abcd
_build_pattern = re.compile(r'([0-9]+)\+([0-9a-f]{5,40})$')

# release-tags in the form of v{major}.{minor}.{patch}[-{suffix}]
_major_minor_patch_pattern = re.compile(r'v([0-9]+\.[0-9]+)\.([0-9]+)(-.+)?')


def classify(
    version: str,
    kind: VersionKind | str,
) -> bool:
    '''
    checks whether the given version-string is of the given kind:

    - release: v{major}.{minor}.{patch}, optionally followed by `-`-prefixed pre-release labels
      and a trailing numeric build counter (e.g. v1.8.0-beta.1)
    - dotzero: exactly v{major}.{minor}.0 (no suffix), i.e. the first release of a new branch
    - build: CI build identifiers, i.e. {counter}+{commit-digest} (e.g. v1.8.0-alpha.0.42+abcdef0)

    unknown kinds never match.
    '''
    if not version:
        return False

    try:
        kind = VersionKind(kind)
    except ValueError:
        logger.debug(f'unknown version-kind: {kind=}')
        return False

    if kind is VersionKind.RELEASE:
        return bool(_release_pattern.fullmatch(version))
    if kind is VersionKind.DOTZERO:
        return bool(_dotzero_pattern.fullmatch(version))
    if kind is VersionKind.BUILD:
        return bool(_build_pattern.search(version))

    return False


def major_minor_and_patch(version: str) -> tuple[str, str] | None:
    '''
    returns a two-tuple of dotted `{major}.{minor}` and the raw patch-part (including a
    pre-release suffix, if present) of the given release-tag, or `None` if the tag does not
    look like a release-tag.

    >>> major_minor_and_patch('v1.8.0')
    ('1.8', '0')
    >>> major_minor_and_patch('v1.8.0-beta.1')
    ('1.8', '0-beta.1')
    '''
    if not (match := _major_minor_patch_pattern.search(version)):
        return None

    major_minor, patch, suffix = match.groups()
    return major_minor, patch + (suffix or '')


def parse_to_semver(
    version,
    invalid_semver_ok: bool=False,
) -> semver.VersionInfo:
    '''
    parses the given version into a semver.VersionInfo object.

    Different from strict semver, the given version is preprocessed, if required, to
    convert the version into a valid semver version, if possible.

    The following preprocessings are done:

    - strip away `v` prefix
    - append patch-level `.0` for two-digit versions
    - rm leading zeroes
    '''
    if isinstance(version, semver.VersionInfo):
        return version
    if version is None:
        raise ValueError('version must not be None')

    try:
        return _parse_to_semver(str(version))
    except ValueError:
        if invalid_semver_ok:
            return None

        raise


def _parse_to_semver(version: str) -> semver.VersionInfo:
    def raise_invalid():
        raise ValueError(f'not a valid (semver) version: `{version}`')

    if not version:
        raise_invalid()

    semver_version = version.removeprefix('v')

    try:
        return semver.VersionInfo.parse(semver_version)
    except ValueError:
        pass # try extending `.0` as patch-level

    if '-' in semver_version:
        sep = '-'
    else:
        sep = '+'

    numeric, sep, suffix = semver_version.partition(sep)
    if numeric.count('.') == 1:
        numeric += '.0'

    try:
        return semver.VersionInfo.parse(numeric + sep + suffix)
    except ValueError:
        pass # last try: strip leading zeroes

    try:
        major, minor, patch = numeric.split('.')
        numeric = '.'.join((str(int(major)), str(int(minor)), str(int(patch))))
    except ValueError:
        raise_invalid()

    try:
        return semver.VersionInfo.parse(numeric + sep + suffix)
    except ValueError:
        # re-raise with original version str
        raise_invalid()


T = typing.TypeVar('T')


def sort_newest_first(
    versions: typing.Iterable[T],
    converter: typing.Callable[[T], str]=str,
) -> list[T]:
    '''
    returns the given versions ordered descending according to semver arithmetics. Versions
    that cannot be parsed are retained (in their original relative order) after all parseable
    ones.
    '''
    parseable = []
    unparseable = []

    for v in versions:
        if (parsed := parse_to_semver(converter(v), invalid_semver_ok=True)):
            parseable.append((parsed, v))
        else:
            unparseable.append(v)

    # sorted is stable; equal versions keep their original order
    parseable = sorted(parseable, key=lambda pair: pair[0], reverse=True)

    return [v for _, v in parseable] + unparseable
