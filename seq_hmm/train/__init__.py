"""
Training module.

Supervised model training and model persistence.
"""

from .trainer import SupervisedTrainer
from .persistence import ModelPersistence

__all__ = [
    "SupervisedTrainer",
    "ModelPersistence"
]
