import pytest

from bonsaigotchi.models import (
    BonsaiStyle,
    CareActionKind,
    EmotionalState,
    GrowthStage,
    HealthBucket,
    Stats,
)


def test_enums_accept_legacy_spellings():
    assert GrowthStage("YoungTree") is GrowthStage.YOUNG_TREE
    assert GrowthStage("young-tree") is GrowthStage.YOUNG_TREE
    assert BonsaiStyle("InformalUpright") is BonsaiStyle.INFORMAL_UPRIGHT
    assert CareActionKind("PestTreatment") is CareActionKind.PEST_TREATMENT
    with pytest.raises(ValueError):
        GrowthStage("Shrub")


def test_growth_stages_are_ordered():
    assert GrowthStage.SEEDLING < GrowthStage.SAPLING < GrowthStage.ELDER_TREE
    assert GrowthStage.MATURE_TREE.next_stage() is GrowthStage.ELDER_TREE
    assert GrowthStage.ELDER_TREE.next_stage() is None
    assert GrowthStage.YOUNG_TREE.label == "Young Tree"


def test_stats_always_clamp():
    s = Stats(hydration=95.0, hunger=3.0)
    s.adjust("hydration", 40)
    s.adjust("hunger", -10)
    assert s.hydration == 100.0
    assert s.hunger == 0.0
    s.apply({"stress": 500, "not_a_stat": 3})
    assert s.stress == 100.0


def test_decay_skips_tiny_steps():
    s = Stats(hydration=50.0)
    s.decay(0.0005)
    assert s.hydration == 50.0
    s.decay(1.0)
    assert s.hydration == pytest.approx(35.0)
    assert s.hunger == pytest.approx(10.0)


def test_derived_health_is_smoothed():
    s = Stats(health=100.0, hydration=0.0, hunger=100.0, soil_quality=0.0, pruning_quality=0.0)
    s.update_derived()
    assert s.health == pytest.approx(70.0)
    assert s.growth == 0.0


def test_health_buckets():
    assert HealthBucket.from_health(70) is HealthBucket.HEALTHY
    assert HealthBucket.from_health(69.9) is HealthBucket.WEAK
    assert HealthBucket.from_health(30) is HealthBucket.WEAK
    assert HealthBucket.from_health(29.9) is HealthBucket.SICKLY
    assert HealthBucket.from_health(0) is HealthBucket.DEAD
    assert HealthBucket.from_health(90, is_dead=True) is HealthBucket.DEAD


def test_mood_bands():
    assert EmotionalState.from_score(-71) is EmotionalState.DEPRESSED
    assert EmotionalState.from_score(-50) is EmotionalState.SAD
    assert EmotionalState.from_score(-20) is EmotionalState.ANXIOUS
    assert EmotionalState.from_score(0) is EmotionalState.NEUTRAL
    assert EmotionalState.from_score(39) is EmotionalState.CONTENT
    assert EmotionalState.from_score(69) is EmotionalState.HAPPY
    assert EmotionalState.from_score(70) is EmotionalState.THRIVING
