"""Challenge class registry.

Maps challenge type strings to :class:`Challenge` subclasses (built-in
types plus extension classes named in configuration) and builds the
right instance for a challenge resource.  Types without a registered
class fall back to the generic :class:`Challenge`, so server-specific
challenges are still carried along.

Usage::

    from acmechallenge.challenge.registry import ChallengeRegistry

    registry = ChallengeRegistry(settings.challenges)
    challenge = registry.create(resource_json)
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

from acmechallenge.challenge.base import KEY_TYPE, Challenge
from acmechallenge.errors import AcmeFormatError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from acmechallenge.config.settings import ChallengeSettings

log = logging.getLogger(__name__)

# Maps type string → (module_path, class_name)
_BUILTIN_CHALLENGES: dict[str, tuple[str, str]] = {
    "http-01": ("acmechallenge.challenge.http01", "Http01Challenge"),
    "dns-01": ("acmechallenge.challenge.dns01", "Dns01Challenge"),
    "tls-alpn-01": ("acmechallenge.challenge.tls_alpn01", "TlsAlpn01Challenge"),
}

BUILTIN_TYPES: tuple[str, ...] = tuple(_BUILTIN_CHALLENGES)


class ChallengeRegistry:
    """Registry of challenge classes keyed by type string.

    Parameters
    ----------
    settings:
        The ``challenges`` section of :class:`Settings`.  ``None``
        registers every built-in type and no extensions.

    """

    def __init__(self, settings: ChallengeSettings | None = None) -> None:
        self._classes: dict[str, type[Challenge]] = {}
        enabled = BUILTIN_TYPES if settings is None else settings.enabled
        extensions = () if settings is None else settings.extensions

        for type_str in enabled:
            self._load_builtin(type_str)
        for fqn in extensions:
            self._load_external(fqn)

    def _load_builtin(self, type_str: str) -> None:
        """Import a built-in challenge class and register it."""
        try:
            mod_path, cls_name = _BUILTIN_CHALLENGES[type_str]
        except KeyError:
            msg = f"Unknown challenge type '{type_str}'; built-in types: {list(BUILTIN_TYPES)}"
            raise ValueError(msg) from None
        module = importlib.import_module(mod_path)
        self.register(getattr(module, cls_name))

    def _load_external(self, fqn: str) -> None:
        """Load an extension class by fully-qualified class name.

        Parameters
        ----------
        fqn:
            e.g. ``"mycompany.acme.challenges.Dns02Challenge"``

        """
        module_path, _, cls_name = fqn.rpartition(".")
        if not module_path:
            msg = (
                f"Invalid challenge extension '{fqn}': must be fully "
                "qualified (e.g. 'mypackage.module.ClassName')"
            )
            raise ValueError(msg)

        module = importlib.import_module(module_path)
        cls = getattr(module, cls_name)
        self.register(cls)
        log.info("Loaded challenge extension: %s", fqn)

    def register(self, cls: type[Challenge]) -> None:
        """Register *cls* for its ``challenge_type``.

        A later registration for the same type replaces the earlier one.

        Raises
        ------
        TypeError
            If *cls* is not a :class:`Challenge` subclass with a
            ``challenge_type``.

        """
        if not (isinstance(cls, type) and issubclass(cls, Challenge)):
            msg = f"Challenge class {cls!r} must be a subclass of Challenge"
            raise TypeError(msg)
        challenge_type = cls.challenge_type
        if not isinstance(challenge_type, str) or not challenge_type:
            msg = f"Challenge class '{cls.__name__}' is missing the 'challenge_type' class attribute"
            raise TypeError(msg)

        self._classes[str(challenge_type)] = cls
        log.debug("Registered %s for challenge type %s", cls.__name__, challenge_type)

    def get_class(self, challenge_type: str) -> type[Challenge]:
        """Return the class for *challenge_type*, or :class:`Challenge`."""
        return self._classes.get(challenge_type, Challenge)

    def is_registered(self, challenge_type: str) -> bool:
        return challenge_type in self._classes

    @property
    def registered_types(self) -> list[str]:
        return list(self._classes)

    def create(self, data: Mapping[str, Any]) -> Challenge:
        """Build and load the challenge matching ``data["type"]``.

        Raises
        ------
        AcmeFormatError
            If *data* has no ``type``.

        """
        challenge_type = data.get(KEY_TYPE)
        if challenge_type is None:
            msg = "Challenge data does not contain a type"
            raise AcmeFormatError(msg)
        cls = self.get_class(challenge_type) if isinstance(challenge_type, str) else Challenge
        return cls.from_data(data)
