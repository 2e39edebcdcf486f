"""
Supervised training pipeline for first-order HMMs.

Wraps maximum-likelihood estimation with sample loading and training
statistics suitable for the metadata stored next to saved models.
"""

import time
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..hmm.first_order import FirstOrderHMM
from ..hmm.estimation import prepare_samples
from ..io.samples import load_samples
from ..exceptions import InvalidSampleError
from ..logger import get_logger
from ..utils.numeric import ZERO_ROW_POLICIES

logger = get_logger(__name__)


class SupervisedTrainer:
    """
    Trains FirstOrderHMM models from labeled trajectories.
    """
    
    def __init__(self,
                 n_states: Optional[int] = None,
                 n_symbols: Optional[int] = None,
                 zero_row_policy: Optional[str] = None,
                 random_state: Optional[int] = None):
        """
        Initialize SupervisedTrainer.
        
        Args:
            n_states: Fixed number of hidden states (default: inferred from samples)
            n_symbols: Fixed number of symbols (default: inferred from samples)
            zero_row_policy: Handling of unseen rows (default: from config)
            random_state: Seed given to the trained model's random generator
        
        Raises:
            ValueError: If zero_row_policy is not a known policy
        """
        if zero_row_policy is not None and zero_row_policy not in ZERO_ROW_POLICIES:
            raise ValueError(f"Unknown zero-row policy '{zero_row_policy}', "
                             f"expected one of {ZERO_ROW_POLICIES}")
        
        self.n_states = n_states
        self.n_symbols = n_symbols
        self.zero_row_policy = zero_row_policy
        self.random_state = random_state
        
        self.training_stats = {}
    
    def train(self, samples: Iterable) -> Tuple[FirstOrderHMM, Dict[str, Any]]:
        """
        Train a model on an in-memory sample collection.
        
        Args:
            samples: Sample objects, [observations, states] pairs or dict records
        
        Returns:
            Tuple of (trained model, training statistics)
        
        Raises:
            InvalidSampleError: If there are no samples or any is malformed
        """
        prepared = prepare_samples(samples)
        if not prepared:
            raise InvalidSampleError("No training samples provided")
        
        start_time = time.time()
        
        model = FirstOrderHMM(random_state=self.random_state)
        model.train(prepared,
                    n_states=self.n_states,
                    n_symbols=self.n_symbols,
                    zero_row_policy=self.zero_row_policy)
        
        training_time = time.time() - start_time
        
        self.training_stats = {
            'n_samples': len(prepared),
            'total_length': int(sum(len(s) for s in prepared)),
            'n_states': model.n_states,
            'n_symbols': model.n_symbols,
            'training_time': training_time,
            'hyperparameters': {
                'n_states': self.n_states,
                'n_symbols': self.n_symbols,
                'zero_row_policy': self.zero_row_policy,
                'random_state': self.random_state
            }
        }
        
        logger.info(f"Training completed in {training_time:.3f}s "
                    f"({self.training_stats['n_samples']} samples)")
        
        return model, self.training_stats
    
    def train_from_file(self, samples_path: Union[str, Path]) -> Tuple[FirstOrderHMM, Dict[str, Any]]:
        """
        Train a model on samples stored in a JSON file.
        
        Args:
            samples_path: Path to the samples JSON file
        
        Returns:
            Tuple of (trained model, training statistics)
        """
        samples = load_samples(samples_path)
        model, stats = self.train(samples)
        stats['samples_file'] = str(samples_path)
        return model, stats
