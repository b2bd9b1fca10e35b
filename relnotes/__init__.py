'''
Changelog Generator

Creates the (markdown) changelog for a release from the pull requests merged into a
release-branch since the branch's last release.

The range of commits is derived from the repository's GitHub releases: for each branch
(`master`, `release-{major}.{minor}`), the latest release published from it is determined,
and serves as the range's start (end is the branch's head, unless passed explicitly). Pull
requests are identified from merge-commits and automated cherry-picks; only those labelled
`release-note` are included, w/ the contents of their `release-note` code-block (or their
title).

For major releases ({major}.{minor}.0), a release-notes draft (or a generic scaffold) is
emitted instead, followed by the changelog entries of previous pre-releases.
'''
