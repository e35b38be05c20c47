"""
errors.py
Exception hierarchy shared by the pricing engine, the config layer and the
cluster metadata store.
"""


class KubepriceError(Exception):
    """Base class for every error raised by kubeprice."""


class ConfigurationError(KubepriceError):
    """The deployment is missing something it needs to resolve prices."""


class PricingConfigError(ConfigurationError):
    """The pricing record could not be read, parsed or patched."""


class NoSuchFieldError(PricingConfigError):
    def __init__(self, name: str):
        super().__init__(f"No such field: {name} in obj")
        self.field = name


class FieldNotSettableError(PricingConfigError):
    def __init__(self, name: str):
        super().__init__(f"Cannot set {name} field value")
        self.field = name


class FieldTypeMismatchError(PricingConfigError):
    def __init__(self, name: str):
        super().__init__(f"Provided value type didn't match custom pricing field type for {name}")
        self.field = name


class PricingNotLoadedError(KubepriceError):
    """A lookup ran before download_pricing_data() seeded the cache."""


class ClusterMetaError(KubepriceError):
    """A cluster metadata query or write failed."""
