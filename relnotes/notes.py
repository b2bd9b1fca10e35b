import collections.abc
import logging
import re

import relnotes.model as rnm

logger = logging.getLogger(__name__)


r'''
matches the first release-note code-block in a pull request body, either fenced on separate
lines or inline (```release-note NONE```):

```release-note
{note}
```

[^\S\n] is "all whitespaces except \n" (i.e. trailing blanks after the opening fence are
tolerated)
'''
_release_note_block_pattern = re.compile(
    r'\x60{3}release-note(?:[^\S\n]*\n|[^\S\n]+)(?P<note>.*?)\n?\x60{3}',
    flags=re.DOTALL,
)


def release_note_block(text: str | None) -> str | None:
    '''
    returns the contents of the first release-note block in the given text (verbatim, w/o
    the fence-lines), or `None` if there is no such block (or it is empty).
    '''
    if not text:
        return None

    if not (match := _release_note_block_pattern.search(text.replace('\r\n', '\n'))):
        return None

    note = match.group('note')
    if not note.strip():
        return None

    return note


def extract_note(issue: rnm.Issue) -> str:
    if (note := release_note_block(issue.body)) is not None:
        return note

    logger.debug(f'no release-note block in #{issue.number} - falling back to title')
    return issue.title


def filter_release_noteworthy(
    pr_numbers: collections.abc.Iterable[int],
    issues: collections.abc.Mapping[int, rnm.Issue],
    required_label: str=rnm.DEFAULT_LABEL,
) -> list[int]:
    '''
    returns those of the given pull request numbers that are known (i.e. contained in `issues`)
    and labelled with `required_label`, preserving the passed order.
    '''
    noteworthy = []

    for pr_number in pr_numbers:
        if not (issue := issues.get(pr_number)):
            logger.debug(f'#{pr_number} is unknown - skipping')
            continue

        if not issue.has_label(required_label):
            continue

        noteworthy.append(pr_number)

    logger.info(
        f'{len(noteworthy)} pull requests are labelled {required_label!r}: {noteworthy}'
    )
    return noteworthy


def release_note_prs(
    pr_numbers: collections.abc.Iterable[int],
    issues: collections.abc.Mapping[int, rnm.Issue],
) -> list[rnm.ReleaseNotePR]:
    return [
        rnm.ReleaseNotePR(
            number=pr_number,
            note=extract_note(issues[pr_number]),
            author=issues[pr_number].author,
        )
        for pr_number in pr_numbers
    ]
