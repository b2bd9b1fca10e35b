import pytest

import relnotes.index as rni
import relnotes.model as rnm


def releases(*tags, drafts=()):
    return [
        rnm.Release(tag=tag, is_draft=tag in drafts)
        for tag in tags
    ]


def test_build_index():
    index = rni.build_index(releases('v1.8.0', 'v1.7.5', 'v1.7.0'))

    assert dict(index) == {
        'master': 'v1.8.0',
        'release-1.8': 'v1.8.0',
        'release-1.7': 'v1.7.5',
    }


def test_build_index_sorts_unless_presorted():
    unsorted = releases('v1.7.0', 'v1.7.5', 'v1.8.0')

    assert rni.build_index(unsorted)['release-1.7'] == 'v1.7.5'

    presorted = rni.build_index(unsorted, presorted=True)
    assert presorted['release-1.7'] == 'v1.7.0'
    assert presorted['master'] == 'v1.7.0'


def test_build_index_is_read_only():
    index = rni.build_index(releases('v1.8.0'))

    with pytest.raises(TypeError):
        index['master'] = 'v0.0.1'


def test_drafts_are_ignored():
    index = rni.build_index(releases('v1.9.0', 'v1.8.1', 'v1.8.0', drafts=('v1.9.0', 'v1.8.1')))

    assert dict(index) == {
        'master': 'v1.8.0',
        'release-1.8': 'v1.8.0',
    }


def test_alpha_releases_only_go_to_master():
    index = rni.build_index(releases('v1.9.0-alpha.1', 'v1.8.0', 'v1.8.0-alpha.3'))

    assert dict(index) == {
        'master': 'v1.9.0-alpha.1',
        'release-1.8': 'v1.8.0',
    }


def test_master_is_assigned_once():
    index = rni.build_index(releases('v1.8.2', 'v1.8.0', 'v1.7.0', 'v1.9.0-alpha.1'))

    # sorted newest-first, the alpha is seen before v1.8.0
    assert index['master'] == 'v1.9.0-alpha.1'
    assert index['release-1.8'] == 'v1.8.2'
    assert index['release-1.7'] == 'v1.7.0'


def test_pre_releases_of_dotzero_do_not_claim_master():
    index = rni.build_index(releases('v1.8.0-beta.1', 'v1.7.0'))

    assert index['release-1.8'] == 'v1.8.0-beta.1'
    assert index['master'] == 'v1.7.0'


def test_non_release_tags_are_skipped():
    index = rni.build_index(releases('latest', 'v1.7.1'), presorted=True)

    assert dict(index) == {'release-1.7': 'v1.7.1'}


def test_empty():
    assert dict(rni.build_index(())) == {}
