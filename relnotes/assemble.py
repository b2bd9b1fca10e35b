import collections.abc
import logging
import re

import relnotes.model as rnm
import relnotes.notes as rnn
import version

logger = logging.getLogger(__name__)


NO_NOTABLE_CHANGES = '**No notable changes for this release**'
PLACEHOLDER = '* TBD'

SCAFFOLD_SECTIONS = (
    'Major Themes',
    'Other notable improvements',
    'Known Issues',
    'Provider-specific Notes',
)

_anchor_pattern = re.compile(r'<a\s+(?:name|id)="(?P<anchor>[^"]*)"')


def scaffold() -> str:
    return '\n\n'.join(
        f'## {title}\n\n{PLACEHOLDER}' for title in SCAFFOLD_SECTIONS
    )


def major_minor(tag: str) -> str | None:
    if not (parsed := version.major_minor_and_patch(tag)):
        return None
    return parsed[0]


def _anchor(line: str) -> str | None:
    if not (match := _anchor_pattern.search(line)):
        return None
    return match.group('anchor')


def changelog_entries(
    changelog_text: str,
    target: str,
) -> collections.abc.Generator[str, None, None]:
    '''
    yields the entries from the given changelog-document belonging to the given target
    ({major}.{minor}), in document order.

    The document is split into entries at anchor lines (`<a name="...">`); an entry belongs to
    the target if its anchor starts with `release-{target}-`. Entries are not interpreted any
    further.
    '''
    prefix = f'release-{target}-'
    entry_lines = None

    for line in changelog_text.splitlines():
        if (anchor := _anchor(line)) is not None:
            if entry_lines:
                yield '\n'.join(entry_lines).strip('\n')
            entry_lines = [line] if anchor.startswith(prefix) else None
            continue

        if entry_lines is not None:
            entry_lines.append(line)

    if entry_lines:
        yield '\n'.join(entry_lines).strip('\n')


def _major_sections(
    version_range: rnm.VersionRange,
    draft_text: str | None,
    changelog_text: str | None,
) -> list[str]:
    if draft_text and draft_text.strip():
        sections = [draft_text.strip('\n')]
    else:
        logger.info('no release-notes draft available - using generic scaffold')
        sections = [scaffold()]

    if not changelog_text:
        return sections

    if not (target := major_minor(version_range.end)):
        logger.warning(
            f'cannot determine {{major}}.{{minor}} from {version_range.end} - '
            'will not aggregate changelog entries'
        )
        return sections

    if (entries := list(changelog_entries(changelog_text=changelog_text, target=target))):
        sections.append(f'## Previous Releases Included in {version_range.end}')
        sections.extend(entries)

    return sections


def _patch_sections(
    version_range: rnm.VersionRange,
    release_note_prs: collections.abc.Sequence[rnm.ReleaseNotePR],
) -> list[str]:
    heading = f'### Changelog since {version_range.start}'

    if not release_note_prs:
        return [heading, NO_NOTABLE_CHANGES]

    return [
        heading,
        '\n'.join(release_note_pr.as_bullet() for release_note_pr in release_note_prs),
    ]


def assemble(
    is_major: bool,
    version_range: rnm.VersionRange,
    pr_numbers: collections.abc.Sequence[int],
    issues: collections.abc.Mapping[int, rnm.Issue],
    draft_text: str | None=None,
    changelog_text: str | None=None,
) -> list[str]:
    '''
    returns the (ordered) text-sections of the changelog.

    For major releases, those are the release-notes draft (or a generic scaffold if there is
    none), followed by the changelog entries of all previous releases of the same
    {major}.{minor} (if a changelog-document is passed).

    For patch releases, a list of the passed (release-note-worthy) pull requests is returned.
    '''
    if is_major:
        return _major_sections(
            version_range=version_range,
            draft_text=draft_text,
            changelog_text=changelog_text,
        )

    return _patch_sections(
        version_range=version_range,
        release_note_prs=rnn.release_note_prs(pr_numbers=pr_numbers, issues=issues),
    )
