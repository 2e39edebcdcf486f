"""
Model persistence and metadata storage for trained HMM models.

This module handles serialization/deserialization of HMM models using joblib
and manages JSON metadata storage with training statistics and hyperparameters.
"""

import json
from pathlib import Path
from typing import Dict, Any, Tuple, List
from datetime import datetime

import joblib
import numpy as np

from ..hmm.model import HiddenMarkovModel
from ..exceptions import ModelPersistenceError
from ..logger import get_logger

logger = get_logger(__name__)


class ModelPersistence:
    """
    Handles model serialization, deserialization, and metadata management.

    Each model is stored as `<name>.pkl` with a `<name>_meta.json` sidecar.
    """

    def __init__(self, models_dir: str = "models"):
        """
        Initialize ModelPersistence with target directory.

        Args:
            models_dir: Directory to store models and metadata (default: "models")
        """
        self.models_dir = Path(models_dir)
        self.models_dir.mkdir(parents=True, exist_ok=True)

        logger.debug(f"ModelPersistence initialized: {self.models_dir}")

    def model_paths(self, name: str) -> Tuple[Path, Path]:
        """Return the (model_path, metadata_path) pair for a model name."""
        safe_name = self._sanitize_filename(name)
        return (self.models_dir / f"{safe_name}.pkl",
                self.models_dir / f"{safe_name}_meta.json")

    def save_model(self,
                   name: str,
                   model: HiddenMarkovModel,
                   metadata: Dict[str, Any],
                   overwrite: bool = False) -> Tuple[str, str]:
        """
        Save HMM model and metadata to disk.

        Args:
            name: Model name
            model: Trained model
            metadata: Training metadata dictionary
            overwrite: Whether to overwrite existing files (default: False)

        Returns:
            Tuple of (model_path, metadata_path) for saved files

        Raises:
            ModelPersistenceError: If saving fails or files exist without overwrite
        """
        model_path, metadata_path = self.model_paths(name)

        if model.is_empty:
            raise ModelPersistenceError(f"Refusing to save untrained model '{name}'")

        if not overwrite:
            if model_path.exists():
                raise ModelPersistenceError(f"Model file already exists: {model_path}")
            if metadata_path.exists():
                raise ModelPersistenceError(f"Metadata file already exists: {metadata_path}")

        try:
            serializable_metadata = self._prepare_metadata_for_serialization(metadata)

            serializable_metadata.update({
                'name': name,
                'saved_at': datetime.now().isoformat(),
                'model_file': model_path.name,
                'metadata_file': metadata_path.name,
                'model_class': model.__class__.__name__,
                'model_parameters': {
                    'n_states': model.n_states,
                    'n_symbols': model.n_symbols
                }
            })

            logger.debug(f"Saving model to: {model_path}")
            joblib.dump(model, model_path, compress=3)

            logger.debug(f"Saving metadata to: {metadata_path}")
            with open(metadata_path, 'w', encoding='utf-8') as f:
                json.dump(serializable_metadata, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise ModelPersistenceError(f"Failed to save model '{name}': {e}")

        logger.info(f"Saved model '{name}' to {model_path}")

        return str(model_path), str(metadata_path)

    def load_model(self, name: str) -> Tuple[HiddenMarkovModel, Dict[str, Any]]:
        """
        Load HMM model and metadata from disk.

        Args:
            name: Model name

        Returns:
            Tuple of (model, metadata)

        Raises:
            ModelPersistenceError: If loading fails or files not found
        """
        model_path, metadata_path = self.model_paths(name)

        if not model_path.exists():
            raise ModelPersistenceError(f"Model file not found: {model_path}")
        if not metadata_path.exists():
            raise ModelPersistenceError(f"Metadata file not found: {metadata_path}")

        try:
            logger.debug(f"Loading model from: {model_path}")
            model = joblib.load(model_path)

            if not isinstance(model, HiddenMarkovModel):
                raise ModelPersistenceError(f"Loaded object is not a HiddenMarkovModel: {type(model)}")

            logger.debug(f"Loading metadata from: {metadata_path}")
            with open(metadata_path, 'r', encoding='utf-8') as f:
                metadata = json.load(f)

            self._validate_model_metadata_consistency(model, metadata)
        except Exception as e:
            if isinstance(e, ModelPersistenceError):
                raise
            raise ModelPersistenceError(f"Failed to load model '{name}': {e}") from e

        logger.info(f"Loaded model '{name}' from {model_path}")

        return model, metadata

    def list_available_models(self) -> List[Dict[str, Any]]:
        """
        List all available models with their basic information.

        Returns:
            List of dictionaries with model information
        """
        models_info = []

        for model_file in sorted(self.models_dir.glob("*.pkl")):
            name = model_file.stem
            metadata_file = self.models_dir / f"{name}_meta.json"

            info = {
                'name': name,
                'model_file': str(model_file),
                'metadata_file': str(metadata_file),
                'metadata_exists': metadata_file.exists()
            }

            if metadata_file.exists():
                try:
                    with open(metadata_file, 'r', encoding='utf-8') as f:
                        metadata = json.load(f)
                    info.update({
                        'n_samples': metadata.get('n_samples', 'unknown'),
                        'model_parameters': metadata.get('model_parameters', {}),
                        'saved_at': metadata.get('saved_at', 'unknown')
                    })
                except (OSError, json.JSONDecodeError):
                    info['metadata_error'] = True

            models_info.append(info)

        return models_info

    def delete_model(self, name: str) -> bool:
        """
        Delete model and metadata files.

        Returns:
            True if any file was deleted
        """
        deleted_files = []
        for path in self.model_paths(name):
            if path.exists():
                path.unlink()
                deleted_files.append(str(path))

        if deleted_files:
            logger.info(f"Deleted files for model {name}: {deleted_files}")
            return True

        logger.warning(f"No files found to delete for model: {name}")
        return False

    def _sanitize_filename(self, name: str) -> str:
        """
        Sanitize model name for use as filename.

        Args:
            name: Original model name

        Returns:
            Sanitized filename-safe string
        """
        safe_name = name.replace(' ', '_').replace('-', '_')
        safe_name = ''.join(c for c in safe_name if c.isalnum() or c == '_')
        safe_name = safe_name.lower()

        if not safe_name:
            raise ModelPersistenceError(f"Model name '{name}' has no usable characters")

        return safe_name

    def _prepare_metadata_for_serialization(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert numpy values inside metadata into JSON-serializable types.
        """
        serializable = {}

        for key, value in metadata.items():
            if isinstance(value, np.ndarray):
                serializable[key] = value.tolist()
            elif isinstance(value, np.integer):
                serializable[key] = int(value)
            elif isinstance(value, np.floating):
                serializable[key] = float(value)
            elif isinstance(value, dict):
                serializable[key] = self._prepare_metadata_for_serialization(value)
            elif isinstance(value, list):
                serializable[key] = [
                    item.tolist() if isinstance(item, np.ndarray) else
                    int(item) if isinstance(item, np.integer) else
                    float(item) if isinstance(item, np.floating) else
                    item for item in value
                ]
            else:
                serializable[key] = value

        return serializable

    def _validate_model_metadata_consistency(self, model: HiddenMarkovModel, metadata: Dict[str, Any]):
        """
        Validate that a loaded model matches its metadata.

        Raises:
            ModelPersistenceError: If inconsistencies are found
        """
        model_params = metadata.get('model_parameters', {})

        if model_params.get('n_states') != model.n_states:
            raise ModelPersistenceError(
                f"Model n_states mismatch: metadata={model_params.get('n_states')}, "
                f"model={model.n_states}"
            )

        if model_params.get('n_symbols') != model.n_symbols:
            raise ModelPersistenceError(
                f"Model n_symbols mismatch: metadata={model_params.get('n_symbols')}, "
                f"model={model.n_symbols}"
            )

        if model.is_empty:
            raise ModelPersistenceError("Loaded model has no parameters")

        for tensor in model.get_parameters():
            if np.any(np.isnan(tensor)):
                raise ModelPersistenceError("Loaded model contains NaN probabilities")
