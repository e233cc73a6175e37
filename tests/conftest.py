import pytest

from voice_energy.models import EnergyConfig


@pytest.fixture
def default_config() -> EnergyConfig:
    return EnergyConfig.default()
