class CapabilityError(RuntimeError):
    pass


class CapabilityResolutionError(CapabilityError):
    def __init__(self, *, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"capability resolution failed: {source} ({detail})")


class UnsupportedOperationError(ValueError):
    def __init__(self, value: object):
        self.value = value
        super().__init__(f"unsupported lifecycle operation {value!r}")
