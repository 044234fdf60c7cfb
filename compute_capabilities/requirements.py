from compute_capabilities.models import ImageClass, Platform, Requirement
from compute_capabilities.providers import (
    IdentityCapabilityProvider,
    NetworkCapabilityProvider,
)


def identify_vlan_requirement(
    network: NetworkCapabilityProvider | None,
) -> Requirement:
    """A VLAN becomes mandatory at launch once the account has subscribed to one."""
    if network is None:
        return Requirement.NONE
    document = network.network_capabilities()
    if not document.vlan_supported or not document.vlan_subscribed:
        return Requirement.NONE
    return Requirement.REQUIRED


def identify_shell_key_requirement(
    identity: IdentityCapabilityProvider | None,
    platform: Platform = Platform.UNKNOWN,
) -> Requirement:
    if identity is None:
        return Requirement.NONE
    if not identity.identity_capabilities().shell_keys_supported:
        return Requirement.NONE
    return Requirement.OPTIONAL


def identify_image_requirement(image_class: ImageClass) -> Requirement:
    if image_class == ImageClass.MACHINE:
        return Requirement.REQUIRED
    return Requirement.OPTIONAL


def identify_password_requirement(platform: Platform = Platform.UNKNOWN) -> Requirement:
    return Requirement.OPTIONAL


def identify_data_center_launch_requirement() -> Requirement:
    return Requirement.NONE


def identify_root_volume_requirement() -> Requirement:
    return Requirement.NONE


def identify_static_ip_requirement() -> Requirement:
    return Requirement.NONE


def identify_subnet_requirement() -> Requirement:
    return Requirement.REQUIRED
