"""Trading service provider registry."""

from __future__ import annotations

from powerposition.errors import SettingsError
from powerposition.providers.base import BasePowerProvider

# Lazy registry: classes are imported on demand so a provider's own
# dependencies are only needed when it is selected.
PROVIDER_CLASSES: dict[str, str] = {
    "mock": "powerposition.providers.mock.MockPowerProvider",
}


def create_provider(name: str, **kwargs) -> BasePowerProvider:
    """Instantiate a provider by registered name or dotted ``module.ClassName`` path."""
    import importlib

    dotted = PROVIDER_CLASSES.get(name.strip().lower(), name.strip())
    if "." not in dotted:
        raise SettingsError(
            f"Unsupported provider '{name}'. "
            f"Supported: {', '.join(PROVIDER_CLASSES)} or a dotted class path"
        )
    module_path, cls_name = dotted.rsplit(".", 1)
    try:
        module = importlib.import_module(module_path)
        cls = getattr(module, cls_name)
    except (ImportError, AttributeError) as exc:
        raise SettingsError(f"Cannot load provider '{name}': {exc}") from exc
    if not (isinstance(cls, type) and issubclass(cls, BasePowerProvider)):
        raise SettingsError(f"'{dotted}' is not a BasePowerProvider subclass")
    return cls(**kwargs)


__all__ = ["BasePowerProvider", "PROVIDER_CLASSES", "create_provider"]
