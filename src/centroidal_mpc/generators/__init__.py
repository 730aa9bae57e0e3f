"""Generators for footsteps and reference ZMP trajectories."""

from .footstep_generator import Contact, generate_footsteps
from .zmp_reference import State, ZmpReferenceGenerator

__all__ = ['Contact', 'generate_footsteps', 'State', 'ZmpReferenceGenerator']
