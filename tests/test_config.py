import pytest

from stadium_gates.config import SimulationConfig


def test_defaults_match_classic_run():
    cfg = SimulationConfig()
    assert (cfg.population, cfg.gates, cfg.minutes_per_slot, cfg.seed) == (10, 2, 1, 42)
    assert cfg.serial_range() == (1_000_000, 1_000_009)


@pytest.mark.parametrize("field", ["population", "gates", "minutes_per_slot", "tick_seconds"])
def test_validate_rejects_non_positive(field):
    with pytest.raises(ValueError):
        SimulationConfig(**{field: 0}).validate()
