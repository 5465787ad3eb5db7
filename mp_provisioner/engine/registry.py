"""Ordered registry of provisioner variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional

from mp_common.errors import ConfigurationError

if TYPE_CHECKING:
    from mp_provisioner.providers.base import Provisioner
    from mp_provisioner.remote.drivers import Driver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredProvisioner:
    """Name and constructor of one provisioner variant."""

    name: str
    new: Callable[["Driver"], "Provisioner"]


class ProvisionerRegistry:
    """Registration-ordered mapping of provisioner variants.

    Populate it once, then :meth:`freeze` it; a frozen registry is only read
    and may be shared between threads.
    """

    def __init__(self, entries: Optional[List[RegisteredProvisioner]] = None) -> None:
        self._entries: Dict[str, RegisteredProvisioner] = {}
        self._frozen = False
        for entry in entries or []:
            self.register(entry.name, entry)

    def register(self, name: str, entry: RegisteredProvisioner) -> None:
        """Append a variant; names are unique."""
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register provisioner '{name}': registry is frozen"
            )
        if name in self._entries:
            raise ConfigurationError(f"Provisioner '{name}' is already registered")
        self._entries[name] = entry
        logger.debug("Registered provisioner %s", name)

    def get(self, name: str) -> Optional[RegisteredProvisioner]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return list(self._entries)

    def freeze(self) -> "ProvisionerRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[RegisteredProvisioner]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries
