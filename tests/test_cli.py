"""
Integration tests for the seq-hmm command-line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from seq_hmm.cli.main import app
from seq_hmm.cli.errors import EXIT_CODES
from seq_hmm.io.samples import save_samples, load_samples


@pytest.fixture
def cli_runner():
    """Create CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def samples_file(temp_dir, health_model):
    """Labeled samples drawn from the health model."""
    samples = health_model.generate_samples(5, 15, 200)
    return save_samples(samples, temp_dir / "samples.json")


@pytest.fixture
def trained_models_dir(cli_runner, temp_dir, samples_file):
    """Directory holding a model trained through the CLI."""
    models_dir = temp_dir / "models"
    result = cli_runner.invoke(app, ["train", str(samples_file), str(models_dir), "--name", "health"])
    assert result.exit_code == 0, result.output
    return models_dir


def test_train_command(trained_models_dir):
    assert (trained_models_dir / "health.pkl").exists()
    assert (trained_models_dir / "health_meta.json").exists()
    
    with open(trained_models_dir / "health_meta.json") as f:
        metadata = json.load(f)
    assert metadata['n_samples'] == 200
    assert metadata['model_parameters']['n_states'] == 2


def test_train_refuses_overwrite(cli_runner, trained_models_dir, samples_file):
    result = cli_runner.invoke(app, ["train", str(samples_file), str(trained_models_dir), "--name", "health"])
    assert result.exit_code == EXIT_CODES["model_error"]
    
    result = cli_runner.invoke(app, ["train", str(samples_file), str(trained_models_dir),
                                     "--name", "health", "--force"])
    assert result.exit_code == 0, result.output


@pytest.mark.parametrize("policy", ["uniform", "zero", "raise"])
def test_train_zero_row_policies(cli_runner, temp_dir, samples_file, policy):
    result = cli_runner.invoke(app, ["train", str(samples_file), str(temp_dir / "models"),
                                     "--zero-row-policy", policy])
    assert result.exit_code == 0, result.output


def test_train_unknown_zero_row_policy(cli_runner, temp_dir, samples_file):
    result = cli_runner.invoke(app, ["train", str(samples_file), str(temp_dir / "models"),
                                     "--zero-row-policy", "bogus"])
    assert result.exit_code == EXIT_CODES["invalid_usage"]
    assert not isinstance(result.exception, ValueError)
    assert "Unknown zero-row policy" in result.output
    assert not (temp_dir / "models" / "model.pkl").exists()


def test_train_unsatisfiable_zero_row_policy(cli_runner, temp_dir):
    # State 1 is declared but never visited, so its rows have no counts
    samples = temp_dir / "sparse.json"
    samples.write_text(json.dumps([{'observations': [0, 1], 'states': [0, 0]}]))
    
    result = cli_runner.invoke(app, ["train", str(samples), str(temp_dir / "models"),
                                     "--states", "2", "--zero-row-policy", "raise"])
    assert result.exit_code == EXIT_CODES["model_error"]
    assert "DegenerateDistributionError" in result.output


def test_predict_corrupt_model_file(cli_runner, trained_models_dir):
    (trained_models_dir / "health.pkl").write_bytes(b"not a pickle")
    result = cli_runner.invoke(app, ["predict", str(trained_models_dir), "0", "1", "--name", "health"])
    assert result.exit_code == EXIT_CODES["model_error"]
    assert "ModelPersistenceError" in result.output


def test_config_with_unknown_log_level(cli_runner, temp_dir):
    config_file = temp_dir / "config.json"
    config_file.write_text(json.dumps({'logging': {'level': 'chatty'}}))
    result = cli_runner.invoke(app, ["--config", str(config_file), "version"])
    assert result.exit_code == EXIT_CODES["config_error"]


def test_train_invalid_samples(cli_runner, temp_dir):
    bad = temp_dir / "bad.json"
    bad.write_text(json.dumps([{'observations': [0, 1], 'states': [0]}]))
    
    result = cli_runner.invoke(app, ["train", str(bad), str(temp_dir / "models")])
    assert result.exit_code == EXIT_CODES["sample_error"]
    assert "InvalidSampleError" in result.output


def test_predict_command(cli_runner, trained_models_dir, temp_dir):
    output = temp_dir / "result.json"
    result = cli_runner.invoke(app, ["predict", str(trained_models_dir), "0", "1", "2",
                                     "--name", "health", "--output", str(output)])
    assert result.exit_code == 0, result.output
    assert "Log-probability" in result.output
    
    with open(output) as f:
        data = json.load(f)
    assert data['observations'] == [0, 1, 2]
    assert len(data['states']) == 3


def test_predict_out_of_range_symbol(cli_runner, trained_models_dir):
    result = cli_runner.invoke(app, ["predict", str(trained_models_dir), "0", "9", "--name", "health"])
    assert result.exit_code == EXIT_CODES["invalid_usage"]


def test_predict_missing_model(cli_runner, trained_models_dir):
    result = cli_runner.invoke(app, ["predict", str(trained_models_dir), "0", "--name", "nope"])
    assert result.exit_code == EXIT_CODES["model_error"]


def test_generate_command(cli_runner, trained_models_dir, temp_dir):
    output = temp_dir / "generated.json"
    result = cli_runner.invoke(app, ["generate", str(trained_models_dir), str(output),
                                     "--name", "health", "--min-length", "3",
                                     "--max-length", "6", "--size", "12", "--seed", "4"])
    assert result.exit_code == 0, result.output
    
    samples = load_samples(output)
    assert len(samples) == 12
    assert all(3 <= len(s) < 6 for s in samples)


def test_generate_invalid_range(cli_runner, trained_models_dir, temp_dir):
    result = cli_runner.invoke(app, ["generate", str(trained_models_dir), str(temp_dir / "x.json"),
                                     "--name", "health", "--min-length", "6", "--max-length", "3"])
    assert result.exit_code == EXIT_CODES["invalid_usage"]


def test_list_command(cli_runner, trained_models_dir):
    result = cli_runner.invoke(app, ["list", str(trained_models_dir)])
    assert result.exit_code == 0
    assert "health" in result.output


def test_config_option(cli_runner, trained_models_dir, temp_dir):
    config_file = temp_dir / "config.json"
    config_file.write_text(json.dumps({'generation': {'size': 3, 'min_length': 2, 'max_length': 3}}))
    output = temp_dir / "generated.json"
    
    result = cli_runner.invoke(app, ["--config", str(config_file), "generate",
                                     str(trained_models_dir), str(output), "--name", "health"])
    assert result.exit_code == 0, result.output
    assert [len(s) for s in load_samples(output)] == [2, 2, 2]


def test_version_command(cli_runner):
    result = cli_runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "SeqHMM Version 0.1.0" in result.output


def test_exit_code_mapping():
    from seq_hmm.cli.errors import exit_code_for, SeqHMMCLIError
    from seq_hmm.exceptions import InvalidSampleError, ModelStateError, DegenerateDistributionError
    
    assert exit_code_for(InvalidSampleError("x")) == EXIT_CODES["sample_error"]
    assert exit_code_for(ModelStateError("x")) == EXIT_CODES["model_error"]
    assert exit_code_for(DegenerateDistributionError("x")) == EXIT_CODES["model_error"]
    assert exit_code_for(SeqHMMCLIError("x", exit_code=13)) == 13
    assert exit_code_for(ValueError("x")) == EXIT_CODES["invalid_usage"]
    assert exit_code_for(RuntimeError("x")) == EXIT_CODES["general_error"]
