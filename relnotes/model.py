import dataclasses
import logging

logger = logging.getLogger(__name__)


MASTER_BRANCH = 'master'
RELEASE_BRANCH_PREFIX = 'release-'
DEFAULT_LABEL = 'release-note'


@dataclasses.dataclass(frozen=True)
class Release:
    tag: str
    is_draft: bool = False
    is_prerelease: bool = False


@dataclasses.dataclass(frozen=True)
class Commit:
    hash: str
    message: str


@dataclasses.dataclass(frozen=True)
class Issue:
    number: int
    title: str
    body: str | None = None
    author: str | None = None
    labels: frozenset[str] = frozenset()

    def has_label(self, label: str) -> bool:
        return label in self.labels


@dataclasses.dataclass(frozen=True)
class VersionRange:
    start: str
    end: str

    def __str__(self):
        return f'{self.start}..{self.end}'


@dataclasses.dataclass(frozen=True)
class ReleaseNotePR:
    '''
    a pull request that was found to be release-note-worthy, along with the note extracted from
    its body (or its title, if the body did not contain a release-note block)
    '''
    number: int
    note: str
    author: str | None = None

    def as_bullet(self) -> str:
        author = f', @{self.author}' if self.author else ''
        return f'* {self.note} (#{self.number}{author})'


@dataclasses.dataclass
class Changelog:
    version_range: VersionRange
    is_major: bool
    pr_numbers: list[int]
    release_note_prs: list[ReleaseNotePR]
    sections: list[str]

    def as_markdown(self) -> str:
        return '\n\n'.join(section.strip('\n') for section in self.sections) + '\n'
