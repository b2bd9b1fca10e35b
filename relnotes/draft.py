import logging

import requests

import http_requests
import relnotes.errors as rne
import relnotes.model as rnm
import version

logger = logging.getLogger(__name__)


def draft_url(
    template: str,
    version_range: rnm.VersionRange,
) -> str | None:
    '''
    renders the given url-template. Supported placeholders are `{major_minor}` (e.g. `1.8`) and
    `{end_tag}` (e.g. `v1.8.0`). Returns `None` if the template refers to `major_minor`, which
    cannot be determined from the range's end. Unknown placeholders raise
    `InvalidDraftUrlTemplate`.
    '''
    if (parsed := version.major_minor_and_patch(version_range.end)):
        major_minor = parsed[0]
    elif '{major_minor}' in template:
        logger.warning(f'cannot determine {{major}}.{{minor}} from {version_range.end}')
        return None
    else:
        major_minor = None

    try:
        return template.format(
            major_minor=major_minor,
            end_tag=version_range.end,
        )
    except (KeyError, IndexError, ValueError) as e:
        raise rne.InvalidDraftUrlTemplate(template=template, reason=str(e)) from e


def _default_session() -> requests.Session:
    return http_requests.mount_default_adapter(
        session=requests.Session(),
        flags=http_requests.AdapterFlag.RETRY,
    )


def fetch_draft(
    url: str,
    session: requests.Session | None=None,
    timeout: int=30,
) -> str | None:
    '''
    retrieves the release-notes draft from the given url. A missing draft (HTTP 404) is not
    considered an error (`None` is returned); any other error is raised as
    `CollaboratorFailure`.
    '''
    if not session:
        session = _default_session()

    logger.info(f'fetching release-notes draft from {url}')

    with rne.collaborator_call(stage='fetch-draft', identifier=url):
        resp = session.get(url, timeout=timeout)

        if resp.status_code == 404:
            logger.info(f'no release-notes draft found at {url}')
            return None

        resp.raise_for_status()

    return resp.text
