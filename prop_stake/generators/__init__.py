"""Synthetic activity generators."""

from prop_stake.generators.activity import Action, ActivityGenerator
from prop_stake.generators.base import BaseGenerator

__all__ = ["Action", "ActivityGenerator", "BaseGenerator"]
