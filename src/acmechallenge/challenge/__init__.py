"""ACME challenge model.

Exports the generic challenge, the concrete challenge types and the
registry that picks one for a challenge resource.
"""

from acmechallenge.challenge.base import Challenge
from acmechallenge.challenge.dns01 import Dns01Challenge
from acmechallenge.challenge.http01 import Http01Challenge
from acmechallenge.challenge.registry import ChallengeRegistry
from acmechallenge.challenge.tls_alpn01 import TlsAlpn01Challenge
from acmechallenge.challenge.token import TokenChallenge

__all__ = [
    "Challenge",
    "ChallengeRegistry",
    "Dns01Challenge",
    "Http01Challenge",
    "TlsAlpn01Challenge",
    "TokenChallenge",
]
