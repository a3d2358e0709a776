"""
Identity providers for the habit tracker.

The tracker only needs a stable user id to key each user's document. The id
comes from an anonymous session; no credentials or profile data are used.

Classes:
    IdentityProvider: Interface for getting or creating an anonymous identity
    StaticIdentityProvider: Provider with a fixed, already known id
    CognitoIdentityProvider: Unauthenticated identities from a Cognito identity pool
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import IdentityUnavailableError
from ..utils.log import log_event

logger = logging.getLogger(__name__)


class IdentityProvider(ABC):
    """Source of the user id used to key tracker documents."""

    @abstractmethod
    def current_user_id(self) -> Optional[str]:
        """Return the id of the current session, or None if there is none."""

    @abstractmethod
    def sign_in_anonymously(self) -> str:
        """
        Create an anonymous session and return its user id.

        Raises:
            IdentityUnavailableError: If no session can be created
        """

    def resolve_user_id(self) -> str:
        """Return the current user id, signing in anonymously when needed."""
        return self.current_user_id() or self.sign_in_anonymously()


class StaticIdentityProvider(IdentityProvider):
    """
    Provider for an id that is already known.

    Used when the caller's identity arrives with the request, as in the API
    Gateway handler, and in tests. Without an id it behaves like a provider
    whose sign-in always fails.
    """

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id

    def sign_in_anonymously(self) -> str:
        if not self.user_id:
            raise IdentityUnavailableError("No user identity available")
        return self.user_id


class CognitoIdentityProvider(IdentityProvider):
    """
    Anonymous identities from an Amazon Cognito identity pool.

    The pool must allow unauthenticated identities. ``GetId`` is called
    without request signing, the same way a browser client obtains a guest
    identity, and the returned identity id is cached for the lifetime of the
    provider.

    Attributes:
        identity_pool_id: Cognito identity pool id
        region: AWS region of the pool
        client: Boto3 cognito-identity client

    Example:
        >>> identity = CognitoIdentityProvider("us-east-1:1234abcd-...")
        >>> user_id = identity.resolve_user_id()
    """

    def __init__(
        self,
        identity_pool_id: Optional[str] = None,
        region: Optional[str] = None,
        identity_id: Optional[str] = None,
        client: Any = None,
    ):
        """
        Initialize the Cognito identity provider.

        Args:
            identity_pool_id: Pool id, uses TRACKER_IDENTITY_POOL_ID if not provided
            region: Optional region override, uses AWS_REGION if not provided
            identity_id: Previously issued identity id to resume
            client: Optional pre-built cognito-identity client

        Raises:
            ValueError: If no identity pool id is configured
        """
        self.identity_pool_id = identity_pool_id or os.getenv("TRACKER_IDENTITY_POOL_ID")
        self.region = region or os.getenv("AWS_REGION", "us-east-1")

        if not self.identity_pool_id:
            raise ValueError(
                "Identity pool id must be provided either as parameter "
                "or TRACKER_IDENTITY_POOL_ID environment variable"
            )

        self.client = client or boto3.client(
            "cognito-identity",
            region_name=self.region,
            config=Config(signature_version=UNSIGNED),
        )
        self._identity_id = identity_id

    def current_user_id(self) -> Optional[str]:
        return self._identity_id

    def sign_in_anonymously(self) -> str:
        try:
            response = self.client.get_id(IdentityPoolId=self.identity_pool_id)
        except (ClientError, BotoCoreError) as e:
            log_event(
                logger,
                "ANONYMOUS_SIGN_IN_FAILED",
                level=logging.ERROR,
                identity_pool_id=self.identity_pool_id,
                error=str(e),
            )
            raise IdentityUnavailableError(f"Anonymous sign-in failed: {e}") from e

        self._identity_id = response["IdentityId"]
        log_event(logger, "ANONYMOUS_SIGN_IN", identity_pool_id=self.identity_pool_id)
        return self._identity_id
