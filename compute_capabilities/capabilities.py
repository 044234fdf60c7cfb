import logging
from threading import Lock

from compute_capabilities import requirements, state_machine
from compute_capabilities.clients.capabilities import CapabilityClient
from compute_capabilities.config import Settings, get_settings
from compute_capabilities.errors import CapabilityResolutionError
from compute_capabilities.metrics import metrics
from compute_capabilities.models import (
    BackendCapabilityFlags,
    ComputeProfile,
    ImageClass,
    Operation,
    Platform,
    Requirement,
    VmState,
)
from compute_capabilities.providers import (
    BackendCapabilityProvider,
    IdentityCapabilityProvider,
    NetworkCapabilityProvider,
    StaticCapabilityProvider,
)


logger = logging.getLogger(__name__)


class ServerCapabilities:
    """Virtual machine capabilities of one provider account.

    Flags are resolved from the backend collaborator on first use and kept for
    the lifetime of the object; call ``refresh()`` to resolve them again. Every
    lifecycle decision is delegated to ``state_machine``.
    """

    def __init__(
        self,
        backend: BackendCapabilityProvider,
        network: NetworkCapabilityProvider | None = None,
        identity: IdentityCapabilityProvider | None = None,
        profile: ComputeProfile | None = None,
    ):
        self.backend = backend
        self.network = network
        self.identity = identity
        self.profile = profile or ComputeProfile()
        self._lock = Lock()
        self._flags: BackendCapabilityFlags | None = None

    def flags(self) -> BackendCapabilityFlags:
        with self._lock:
            if self._flags is None:
                source = type(self.backend).__name__
                try:
                    resolved = self.backend.capability_flags()
                except CapabilityResolutionError:
                    metrics.record_resolution(False)
                    logger.warning("backend capability flags unavailable source=%s", source)
                    raise
                except Exception as exc:  # noqa: BLE001
                    metrics.record_resolution(False)
                    logger.warning(
                        "backend capability flags unavailable source=%s error=%s",
                        source,
                        exc,
                    )
                    raise CapabilityResolutionError(source=source, detail=str(exc)) from exc
                if not isinstance(resolved, BackendCapabilityFlags):
                    metrics.record_resolution(False)
                    raise CapabilityResolutionError(
                        source=source,
                        detail=f"expected BackendCapabilityFlags, got {type(resolved).__name__}",
                    )
                metrics.record_resolution(True)
                logger.debug(
                    "resolved capability flags pause_unpause=%s start_stop=%s suspend_resume=%s",
                    resolved.supports_pause_unpause,
                    resolved.supports_start_stop,
                    resolved.supports_suspend_resume,
                )
                self._flags = resolved
            return self._flags

    def refresh(self) -> None:
        with self._lock:
            self._flags = None

    def close(self) -> None:
        closed: list[object] = []
        for collaborator in (self.backend, self.network, self.identity):
            if collaborator is None or any(collaborator is c for c in closed):
                continue
            closed.append(collaborator)
            close = getattr(collaborator, "close", None)
            if callable(close):
                close()

    def can_perform(self, op: Operation | str, from_state: VmState | str) -> bool:
        operation = state_machine.coerce_operation(op)
        state = state_machine.coerce_state(from_state)
        allowed = state_machine.can_perform(operation, state, self.flags())
        metrics.record_decision(allowed)
        if not allowed:
            logger.debug(
                "lifecycle operation denied op=%s state=%s",
                operation.value,
                state.value,
            )
        return allowed

    def permitted_operations(self, from_state: VmState | str) -> frozenset[Operation]:
        return state_machine.permitted_operations(from_state, self.flags())

    def can_alter(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.ALTER, from_state)

    def can_clone(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.CLONE, from_state)

    def can_pause(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.PAUSE, from_state)

    def can_unpause(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.UNPAUSE, from_state)

    def can_reboot(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.REBOOT, from_state)

    def can_resume(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.RESUME, from_state)

    def can_start(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.START, from_state)

    def can_stop(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.STOP, from_state)

    def can_suspend(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.SUSPEND, from_state)

    def can_terminate(self, from_state: VmState | str) -> bool:
        return self.can_perform(Operation.TERMINATE, from_state)

    def supports(self, op: Operation | str) -> bool:
        return state_machine.supports(op, self.flags())

    def supports_alter(self) -> bool:
        return self.supports(Operation.ALTER)

    def supports_clone(self) -> bool:
        return self.supports(Operation.CLONE)

    def supports_pause(self) -> bool:
        return self.supports(Operation.PAUSE)

    def supports_unpause(self) -> bool:
        return self.supports(Operation.UNPAUSE)

    def supports_reboot(self) -> bool:
        return self.supports(Operation.REBOOT)

    def supports_resume(self) -> bool:
        return self.supports(Operation.RESUME)

    def supports_start(self) -> bool:
        return self.supports(Operation.START)

    def supports_stop(self) -> bool:
        return self.supports(Operation.STOP)

    def supports_suspend(self) -> bool:
        return self.supports(Operation.SUSPEND)

    def supports_terminate(self) -> bool:
        return self.supports(Operation.TERMINATE)

    def cost_factor(self, state: VmState | str) -> int:
        return self.profile.cost_factor

    def identify_vlan_requirement(self) -> Requirement:
        return requirements.identify_vlan_requirement(self.network)

    def identify_shell_key_requirement(
        self, platform: Platform = Platform.UNKNOWN
    ) -> Requirement:
        return requirements.identify_shell_key_requirement(self.identity, platform)

    def identify_image_requirement(self, image_class: ImageClass) -> Requirement:
        return requirements.identify_image_requirement(image_class)

    def identify_password_requirement(
        self, platform: Platform = Platform.UNKNOWN
    ) -> Requirement:
        return requirements.identify_password_requirement(platform)

    def identify_data_center_launch_requirement(self) -> Requirement:
        return requirements.identify_data_center_launch_requirement()

    def identify_root_volume_requirement(self) -> Requirement:
        return requirements.identify_root_volume_requirement()

    def identify_static_ip_requirement(self) -> Requirement:
        return requirements.identify_static_ip_requirement()

    def identify_subnet_requirement(self) -> Requirement:
        return requirements.identify_subnet_requirement()


def build_server_capabilities(settings: Settings | None = None) -> ServerCapabilities:
    settings = settings or get_settings()
    if settings.capability_source == "http":
        client = CapabilityClient(
            base_url=settings.provider_url,
            auth_token=settings.provider_auth_token,
            timeout=settings.request_timeout_sec,
        )
        return ServerCapabilities(backend=client, network=client, identity=client)

    provider = StaticCapabilityProvider.from_settings(settings)
    return ServerCapabilities(backend=provider, network=provider, identity=provider)
