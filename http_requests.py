# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import enum
import functools
import logging

import cachecontrol
import requests

from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class AdapterFlag(enum.Flag):
    RETRY = enum.auto()
    CACHE = enum.auto()


class LoggingRetry(Retry):
    '''
    retries idempotent requests on rate-limiting and server-errors (honouring `Retry-After`),
    logging each attempt. 404 is never retried (absent drafts are expected).
    '''
    def __init__(self, **kwargs):
        defaults = dict(
            total=3,
            connect=3,
            read=3,
            status=3,
            redirect=False,
            status_forcelist=(429, 500, 502, 503, 504),
            raise_on_status=False,
            respect_retry_after_header=True,
            backoff_factor=1.0,
        )
        super().__init__(**(defaults | kwargs))

    def increment(
        self,
        method=None,
        url=None,
        response=None,
        error=None,
        _pool=None,
        _stacktrace=None,
    ):
        # raises if retries are exhausted
        retry = super().increment(method, url, response, error, _pool, _stacktrace)

        status = response.status if response is not None else None
        logger.warning(
            f'{method} {url} failed ({status=}, {error=}) - '
            f'retry {len(retry.history)}/{self.total}'
        )
        return retry


def mount_default_adapter(
    session: requests.Session,
    max_pool_size: int=16, # increase with care, might cause github api "secondary-rate-limit"
    flags: AdapterFlag=AdapterFlag.RETRY,
    retry_cfg: Retry | None=None,
) -> requests.Session:
    '''
    mounts an adapter (caching and / or retrying, depending on `flags`) for both http and https
    to the given session, and returns it.
    '''
    if AdapterFlag.CACHE in flags:
        adapter_ctor = functools.partial(cachecontrol.CacheControlAdapter, cache_etags=True)
    else:
        adapter_ctor = HTTPAdapter

    if AdapterFlag.RETRY in flags:
        adapter_ctor = functools.partial(
            adapter_ctor,
            max_retries=retry_cfg or LoggingRetry(),
        )

    adapter = adapter_ctor(pool_maxsize=max_pool_size)
    session.mount('http://', adapter)
    session.mount('https://', adapter)

    return session
