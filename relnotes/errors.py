import contextlib
import logging

logger = logging.getLogger(__name__)


class RelnotesError(RuntimeError):
    pass


class RangeUnresolvable(RelnotesError):
    def __init__(self, branch: str, user_range: str | None=None):
        self.branch = branch
        self.user_range = user_range
        super().__init__(
            f'unable to set beginning of range automatically for {branch=} ({user_range=}). '
            'Specify it on the command-line.'
        )


class MalformedCommitReference(RelnotesError, ValueError):
    def __init__(self, reference: str, message: str):
        self.reference = reference
        self.commit_message = message
        super().__init__(f'not a valid pull-request reference: {reference!r} in {message!r}')


class InvalidDraftUrlTemplate(RelnotesError):
    def __init__(self, template: str, reason: str):
        self.template = template
        self.reason = reason
        super().__init__(
            f'invalid draft-url template {template!r} ({reason}); supported placeholders: '
            '{major_minor}, {end_tag}'
        )


class CollaboratorFailure(RelnotesError):
    '''
    raised if a call to an external collaborator (GitHub, git, http) failed. `stage` names the
    pipeline step, `identifier` the object (tag, branch, url, ..) the call was made for.
    '''
    def __init__(self, stage: str, identifier: str | None=None, reason: str | None=None):
        self.stage = stage
        self.identifier = identifier
        self.reason = reason

        msg = f'{stage} failed'
        if identifier:
            msg += f' for {identifier}'
        if reason:
            msg += f': {reason}'
        super().__init__(msg)


@contextlib.contextmanager
def collaborator_call(stage: str, identifier: str | None=None):
    '''
    wraps any exception raised within the managed block into a `CollaboratorFailure`. Errors
    already being `RelnotesError`s are passed through unaltered.
    '''
    try:
        yield
    except RelnotesError:
        raise
    except Exception as e:
        logger.debug(f'{stage=} {identifier=} raised {e!r}')
        raise CollaboratorFailure(
            stage=stage,
            identifier=identifier,
            reason=str(e) or type(e).__name__,
        ) from e
