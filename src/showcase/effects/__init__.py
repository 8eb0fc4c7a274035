from showcase.effects.models import EffectOutcome, SideEffectTask
from showcase.effects.runner import EffectSet

__all__ = ["EffectOutcome", "EffectSet", "SideEffectTask"]
