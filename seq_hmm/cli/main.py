"""
Main CLI application for SeqHMM.

Train first-order HMMs from labeled samples, sample new trajectories from a
saved model, and decode observation sequences with Viterbi.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_config, load_config_file
from ..exceptions import SeqHMMError
from ..io.samples import save_samples
from ..logger import set_log_level
from ..train.persistence import ModelPersistence
from ..train.trainer import SupervisedTrainer
from .errors import handle_cli_error, SeqHMMCLIError, EXIT_CODES

console = Console()

app = typer.Typer(
    name="seq-hmm",
    help="First-order discrete Hidden Markov Models: train, generate and decode",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True
)


def _debug_enabled(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("debug"))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all output except errors"),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks on errors"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to JSON configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False
    )
):
    """
    SeqHMM: supervised first-order Hidden Markov Models.

    \b
    Quick Start:
    1. Train a model:     seq-hmm train samples.json models/ --name weather
    2. Sample sequences:  seq-hmm generate models/ out.json --name weather
    3. Decode:            seq-hmm predict models/ 0 1 2 --name weather
    """
    ctx.obj = {"verbose": verbose, "quiet": quiet, "debug": debug}

    try:
        if config_file:
            load_config_file(str(config_file))

        if quiet:
            set_log_level('ERROR')
        elif verbose or debug:
            set_log_level('DEBUG')
        else:
            set_log_level(get_config('logging', 'level') or 'INFO')
    except ValueError as e:
        handle_cli_error(
            SeqHMMCLIError(str(e), exit_code=EXIT_CODES["config_error"]),
            "configuration loading",
            debug
        )


@app.command("train")
def train_model(
    ctx: typer.Context,
    samples_file: Path = typer.Argument(
        ...,
        help="JSON file with labeled samples",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    models_dir: Path = typer.Argument(..., help="Output directory for the trained model"),
    name: str = typer.Option("model", "--name", "-n", help="Name of the saved model"),
    n_states: Optional[int] = typer.Option(None, "--states", "-s", help="Number of hidden states"),
    n_symbols: Optional[int] = typer.Option(None, "--symbols", help="Number of observation symbols"),
    zero_row_policy: Optional[str] = typer.Option(
        None,
        "--zero-row-policy",
        help="Unseen rows: uniform, zero or raise"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing model")
):
    """
    Estimate a model from labeled (observation, state) samples.
    """
    try:
        trainer = SupervisedTrainer(n_states=n_states, n_symbols=n_symbols,
                                    zero_row_policy=zero_row_policy)
        model, stats = trainer.train_from_file(samples_file)

        persistence = ModelPersistence(str(models_dir))
        model_path, _ = persistence.save_model(name, model, stats, overwrite=force)
    except (SeqHMMError, ValueError) as e:
        handle_cli_error(e, "training", _debug_enabled(ctx))
        return

    table = Table(title="Training Summary")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Samples", str(stats['n_samples']))
    table.add_row("Total steps", str(stats['total_length']))
    table.add_row("States", str(stats['n_states']))
    table.add_row("Symbols", str(stats['n_symbols']))
    table.add_row("Model file", model_path)
    console.print(table)


@app.command("generate")
def generate_samples(
    ctx: typer.Context,
    models_dir: Path = typer.Argument(
        ...,
        help="Directory containing trained models",
        exists=True,
        file_okay=False,
        dir_okay=True
    ),
    output_file: Path = typer.Argument(..., help="Where to write the generated samples (JSON)"),
    name: str = typer.Option("model", "--name", "-n", help="Name of the saved model"),
    min_length: Optional[int] = typer.Option(None, "--min-length", help="Shortest sample length"),
    max_length: Optional[int] = typer.Option(None, "--max-length", help="Length upper bound (exclusive)"),
    size: Optional[int] = typer.Option(None, "--size", help="Number of samples"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed")
):
    """
    Sample labeled trajectories from a saved model.
    """
    min_length = get_config('generation', 'min_length') if min_length is None else min_length
    max_length = get_config('generation', 'max_length') if max_length is None else max_length
    size = get_config('generation', 'size') if size is None else size
    seed = get_config('generation', 'random_seed') if seed is None else seed

    try:
        model, _ = ModelPersistence(str(models_dir)).load_model(name)
        samples = model.generate_samples(min_length, max_length, size,
                                         rng=np.random.default_rng(seed))
        save_samples(samples, output_file)
    except (SeqHMMError, ValueError) as e:
        handle_cli_error(e, "generation", _debug_enabled(ctx))
        return

    console.print(f"[green]Wrote {len(samples)} samples to {output_file}[/green]")


@app.command("predict")
def predict_states(
    ctx: typer.Context,
    models_dir: Path = typer.Argument(
        ...,
        help="Directory containing trained models",
        exists=True,
        file_okay=False,
        dir_okay=True
    ),
    observations: List[int] = typer.Argument(..., help="Observation symbol indices"),
    name: str = typer.Option("model", "--name", "-n", help="Name of the saved model"),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Save result as JSON")
):
    """
    Decode the most likely hidden state path for an observation sequence.
    """
    try:
        model, _ = ModelPersistence(str(models_dir)).load_model(name)
        path, log_probability = model.predict(observations)
    except (SeqHMMError, ValueError) as e:
        handle_cli_error(e, "prediction", _debug_enabled(ctx))
        return

    result = {
        'observations': list(observations),
        'states': path.tolist(),
        'log_probability': log_probability
    }

    table = Table(title="Viterbi Path")
    table.add_column("t", style="dim")
    table.add_column("Observation", style="cyan")
    table.add_column("State", style="green")
    for t, (obs, state) in enumerate(zip(result['observations'], result['states'])):
        table.add_row(str(t), str(obs), str(state))
    console.print(table)
    console.print(f"Log-probability: {log_probability:.6f}")

    if output_file:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(result, f, indent=2)
        console.print(f"[green]Results saved to: {output_file}[/green]")


@app.command("list")
def list_models(
    models_dir: Path = typer.Argument(
        ...,
        help="Directory containing trained models",
        exists=True,
        file_okay=False,
        dir_okay=True
    )
):
    """List saved models."""
    models = ModelPersistence(str(models_dir)).list_available_models()
    if not models:
        console.print(f"[yellow]No models found in {models_dir}[/yellow]")
        return

    table = Table(title="Saved Models")
    table.add_column("Name", style="cyan")
    table.add_column("States")
    table.add_column("Symbols")
    table.add_column("Saved at", style="dim")
    for info in models:
        params = info.get('model_parameters', {})
        table.add_row(info['name'],
                      str(params.get('n_states', '?')),
                      str(params.get('n_symbols', '?')),
                      str(info.get('saved_at', 'unknown')))
    console.print(table)


@app.command("version")
def show_version():
    """Show SeqHMM version information."""
    from .. import __version__

    console.print(Panel.fit(
        f"[bold]SeqHMM Version {__version__}[/bold]\n"
        f"First-order discrete Hidden Markov Models\n"
        f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        border_style="blue"
    ))


def cli_main():
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_CODES["general_error"])


if __name__ == "__main__":
    cli_main()
