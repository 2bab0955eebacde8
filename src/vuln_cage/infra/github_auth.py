from __future__ import annotations

import logging
from typing import Callable

from github import Auth, BadCredentialsException, Github, GithubException

from ..core.domain.exceptions import EmptyTokenError, InvalidTokenError, TokenVerificationError

logger = logging.getLogger(__name__)


def verify_github_token(token: str, github_factory: Callable[..., Github] = Github) -> None:
    """Check that ``token`` is accepted by the GitHub API.

    Raises:
        EmptyTokenError: token is empty.
        InvalidTokenError: GitHub rejected the credentials (401).
        TokenVerificationError: any other GitHub error.
    """
    if not token:
        raise EmptyTokenError()

    client = github_factory(auth=Auth.Token(token))
    try:
        rate_limit = client.get_rate_limit()
        core = getattr(rate_limit, "core", None)
        if core:
            logger.info(f"GitHub token verified - remaining: {core.remaining}/{core.limit}")
    except BadCredentialsException as e:
        raise InvalidTokenError() from e
    except GithubException as e:
        raise TokenVerificationError(
            f"when verifying the token, a {e.status} error code was returned", status=e.status
        ) from e
    finally:
        client.close()
