from dataclasses import dataclass
from typing import Protocol

from compute_capabilities.config import Settings
from compute_capabilities.models import (
    BackendCapabilityFlags,
    IdentityCapabilities,
    NetworkCapabilities,
)


class BackendCapabilityProvider(Protocol):
    def capability_flags(self) -> BackendCapabilityFlags: ...


class NetworkCapabilityProvider(Protocol):
    def network_capabilities(self) -> NetworkCapabilities: ...


class IdentityCapabilityProvider(Protocol):
    def identity_capabilities(self) -> IdentityCapabilities: ...


@dataclass(frozen=True)
class StaticCapabilityProvider:
    flags: BackendCapabilityFlags
    vlan_supported: bool = False
    vlan_subscribed: bool = False
    shell_keys_supported: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticCapabilityProvider":
        return cls(
            flags=BackendCapabilityFlags(
                supports_pause_unpause=settings.supports_pause_unpause,
                supports_start_stop=settings.supports_start_stop,
                supports_suspend_resume=settings.supports_suspend_resume,
            ),
            vlan_supported=settings.vlan_supported,
            vlan_subscribed=settings.vlan_subscribed,
            shell_keys_supported=settings.shell_keys_supported,
        )

    def capability_flags(self) -> BackendCapabilityFlags:
        return self.flags

    def network_capabilities(self) -> NetworkCapabilities:
        return NetworkCapabilities(
            vlan_supported=self.vlan_supported,
            vlan_subscribed=self.vlan_subscribed,
        )

    def identity_capabilities(self) -> IdentityCapabilities:
        return IdentityCapabilities(shell_keys_supported=self.shell_keys_supported)
