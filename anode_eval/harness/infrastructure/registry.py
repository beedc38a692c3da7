"""Harness adapter registry — maps a harness variant to its adapter."""

from anode_eval.config.domain.harness import (
    CargoHarness,
    CustomHarness,
    GoHarness,
    NpmHarness,
    PytestHarness,
    TestHarness,
)
from anode_eval.harness.domain.adapter import HarnessAdapter
from anode_eval.harness.infrastructure.adapters import (
    CargoHarnessAdapter,
    CustomHarnessAdapter,
    GoHarnessAdapter,
    NpmHarnessAdapter,
    PytestHarnessAdapter,
)
from anode_eval.harness.infrastructure.errors import HarnessNotSupportedError


def adapter_for(harness: TestHarness) -> HarnessAdapter:
    """Return the adapter for the given harness variant.

    Raises:
        HarnessNotSupportedError: if the variant has no adapter.
    """
    match harness:
        case CargoHarness():
            return CargoHarnessAdapter(harness)
        case NpmHarness():
            return NpmHarnessAdapter(harness)
        case PytestHarness():
            return PytestHarnessAdapter(harness)
        case GoHarness():
            return GoHarnessAdapter(harness)
        case CustomHarness():
            return CustomHarnessAdapter(harness)
    raise HarnessNotSupportedError(harness_type=str(getattr(harness, "type", harness)))
