"""HTTP-01 challenge (RFC 8555 §8.3).

The client serves the key authorization at
``http://{domain}/.well-known/acme-challenge/{token}``.
"""

from __future__ import annotations

from acmechallenge.challenge.token import TokenChallenge
from acmechallenge.core.types import ChallengeType

WELL_KNOWN_PREFIX = "/.well-known/acme-challenge/"


class Http01Challenge(TokenChallenge):
    """HTTP-01 challenge: serve the key authorization over plain HTTP."""

    challenge_type = ChallengeType.HTTP_01

    @property
    def well_known_path(self) -> str:
        """Path the CA will request on port 80."""
        return f"{WELL_KNOWN_PREFIX}{self.token}"

    @property
    def file_content(self) -> str:
        """Body to serve at :attr:`well_known_path`."""
        return self.authorization

    def url_for(self, domain: str) -> str:
        """Full URL the CA fetches when validating *domain*.

        Parameters
        ----------
        domain:
            The DNS identifier being validated.

        Returns
        -------
        str
            ``http://{domain}/.well-known/acme-challenge/{token}``

        """
        return f"http://{domain}{self.well_known_path}"
