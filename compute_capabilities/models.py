from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class VmState(str, Enum):
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    PAUSED = "PAUSED"
    SUSPENDED = "SUSPENDED"
    TERMINATED = "TERMINATED"
    ERROR = "ERROR"
    # Transitional states reported while a provider call is in flight.
    PENDING = "PENDING"
    REBOOTING = "REBOOTING"
    STOPPING = "STOPPING"
    PAUSING = "PAUSING"
    SUSPENDING = "SUSPENDING"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str) -> "VmState":
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.UNKNOWN


DECLARED_STATES: frozenset[VmState] = frozenset(
    {
        VmState.RUNNING,
        VmState.STOPPED,
        VmState.PAUSED,
        VmState.SUSPENDED,
        VmState.TERMINATED,
        VmState.ERROR,
    }
)


class Operation(str, Enum):
    START = "START"
    STOP = "STOP"
    REBOOT = "REBOOT"
    PAUSE = "PAUSE"
    UNPAUSE = "UNPAUSE"
    SUSPEND = "SUSPEND"
    RESUME = "RESUME"
    TERMINATE = "TERMINATE"
    ALTER = "ALTER"
    CLONE = "CLONE"


class Requirement(str, Enum):
    NONE = "NONE"
    OPTIONAL = "OPTIONAL"
    REQUIRED = "REQUIRED"


class ImageClass(str, Enum):
    MACHINE = "MACHINE"
    KERNEL = "KERNEL"
    RAMDISK = "RAMDISK"


class Platform(str, Enum):
    UNIX = "UNIX"
    WINDOWS = "WINDOWS"
    UNKNOWN = "UNKNOWN"


class Architecture(str, Enum):
    I32 = "I32"
    I64 = "I64"


class VisibleScope(str, Enum):
    ACCOUNT_GLOBAL = "ACCOUNT_GLOBAL"
    ACCOUNT_REGION = "ACCOUNT_REGION"
    ACCOUNT_DATACENTER = "ACCOUNT_DATACENTER"


class BackendCapabilityFlags(BaseModel):
    """Account-wide facts about which paired lifecycle calls the backend accepts."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    supports_pause_unpause: bool = False
    supports_start_stop: bool = False
    supports_suspend_resume: bool = False


class NetworkCapabilities(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    vlan_supported: bool = False
    vlan_subscribed: bool = False


class IdentityCapabilities(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    shell_keys_supported: bool = False


@dataclass(frozen=True)
class VerticalScalingCapabilities:
    creates_new_vm: bool
    supports_product_changes: bool
    supports_product_size_changes: bool


@dataclass(frozen=True)
class ComputeProfile:
    """Constant facts about the compute backend that never depend on a VM."""

    provider_term: str = "server"
    maximum_vm_count: int | None = None
    cost_factor: int = 100
    vertical_scaling: VerticalScalingCapabilities = VerticalScalingCapabilities(
        creates_new_vm=False,
        supports_product_changes=True,
        supports_product_size_changes=False,
    )
    vm_visible_scope: VisibleScope = VisibleScope.ACCOUNT_DATACENTER
    vm_product_visible_scope: VisibleScope = VisibleScope.ACCOUNT_DATACENTER
    reserved_user_names: tuple[str, ...] = ()
    architectures: tuple[Architecture, ...] = (Architecture.I32, Architecture.I64)
    api_termination_preventable: bool = False
    basic_analytics_supported: bool = True
    extended_analytics_supported: bool = False
    # User data can be written at launch but is never readable back.
    user_data_supported: bool = True
    user_defined_private_ip_supported: bool = False
    root_password_ssh_key_encrypted: bool = False
    spot_vms_supported: bool = False
    client_request_token_supported: bool = False
    cloud_stored_shell_key_supported: bool = True
    vm_product_dc_constrained: bool = False
