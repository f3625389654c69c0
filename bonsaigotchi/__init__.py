"""A virtual bonsai: life simulation plus a seeded ASCII-art renderer."""
from bonsaigotchi.errors import BonsaiError, RenderCancelled, RenderError, RenderTimeout, ValidationError
from bonsaigotchi.models import (
    BonsaiStyle,
    CareActionKind,
    EnvironmentSnapshot,
    GrowthStage,
    HealthBucket,
    Notification,
    Severity,
    SpecimenState,
)
from bonsaigotchi.renderer import render
from bonsaigotchi.simulation import Simulation, apply_action, new_specimen, tick

__version__ = "0.1.0"
