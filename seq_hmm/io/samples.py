"""
JSON storage for labeled sample collections.

A sample file holds a list of records:

    [
      {"observations": [0, 1, 2], "states": [0, 0, 1]},
      ...
    ]

A top-level object with a "samples" key is accepted as well.
"""

import json
from pathlib import Path
from typing import Iterable, List, Union

from ..hmm.types import Sample
from ..exceptions import InvalidSampleError
from ..logger import get_logger

logger = get_logger(__name__)


def load_samples(path: Union[str, Path]) -> List[Sample]:
    """
    Load samples from a JSON file.
    
    Args:
        path: Path to the JSON file
    
    Returns:
        List of Sample objects (not yet validated for training)
    
    Raises:
        InvalidSampleError: If the file is missing, not JSON, or malformed
    """
    path = Path(path)
    if not path.exists():
        raise InvalidSampleError(f"Sample file not found: {path}")
    
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidSampleError(f"Invalid JSON in {path}: {e}")
    
    if isinstance(data, dict):
        data = data.get('samples')
    if not isinstance(data, list):
        raise InvalidSampleError(f"Expected a list of samples in {path}")
    
    samples = []
    for idx, record in enumerate(data):
        try:
            samples.append(Sample.from_pair(record))
        except (TypeError, ValueError) as e:
            raise InvalidSampleError(f"Malformed sample {idx} in {path}: {e}")
    
    logger.debug(f"Loaded {len(samples)} samples from {path}")
    return samples


def save_samples(samples: Iterable[Sample], path: Union[str, Path]) -> Path:
    """
    Write samples to a JSON file, creating parent directories.
    
    Returns:
        The path written to
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    
    records = [Sample.from_pair(s).to_dict() for s in samples]
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(records, f, indent=2)
    
    logger.debug(f"Saved {len(records)} samples to {path}")
    return path
