"""
Voiceflow CLI entrypoint.

Usage:
    voiceflow env
    voiceflow setup
    voiceflow download <url> -o <dir>
"""

import functools

import click

from voiceflow.config.constants import CLI_NAME, VERSION
from voiceflow.config.manager import config_manager
from voiceflow.schemas.audio import AudioProgress, AudioStage
from voiceflow.services.audio_service import AudioService
from voiceflow.services.environment_service import EnvironmentService
from voiceflow.ui.views.environment import display_environment_summary
from voiceflow.ui.wizard.setup_wizard import run_interactive_setup
from voiceflow.utils.abort import AbortSignal, bind_os_signals
from voiceflow.utils.console import console, quick_error, quick_exit, quick_success
from voiceflow.utils.errors import Cancelled, VoiceflowError
from voiceflow.utils.http_client import HttpClient
from voiceflow.utils.logger import get_data_dir, is_debug, log, set_debug


def handle_errors(func):
    """Map failures to exit codes: 0 for cancellation, 1 for errors."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Cancelled as e:
            log.info(f"Cancelled: {e.message}")
            quick_exit(e.message)
        except (KeyboardInterrupt, EOFError):
            quick_exit("Operation cancelled")
        except VoiceflowError as e:
            log.error(e.message)
            quick_error(e.message, e.suggestion)
        except Exception as e:
            log.exception("Unexpected error")
            quick_error(
                f"Unexpected error: {e}",
                f"Re-run with --debug; details are in {get_data_dir()}/logs",
            )

    return wrapper


@click.group()
@click.version_option(version=VERSION, prog_name=CLI_NAME)
@click.option("--debug", is_flag=True, help="Enable verbose diagnostics.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Install yt-dlp and whisper.cpp, and extract audio as WAV."""
    if debug or config_manager.get("debug"):
        set_debug(True)

    ctx.ensure_object(dict)
    # One configured client per process; proxies come from the environment
    http_client = HttpClient()
    ctx.obj["http_client"] = http_client
    ctx.call_on_close(http_client.close)
    log.debug(f"{CLI_NAME} {VERSION} started (debug={is_debug()})")


@cli.command()
@click.pass_context
@handle_errors
def env(ctx: click.Context) -> None:
    """Show system, hardware and dependency information."""
    with console.status("[cyan]Detecting your system...[/cyan]"):
        report = EnvironmentService.detect_environment(ctx.obj["http_client"])
    display_environment_summary(report)


@cli.command()
@click.pass_context
@handle_errors
def setup(ctx: click.Context) -> None:
    """Install yt-dlp and whisper.cpp interactively."""
    run_interactive_setup(ctx.obj["http_client"])


@cli.command()
@click.argument("url")
@click.option("--output", "-o", "output", type=click.Path(file_okay=False), default=None,
              help="Output directory (default: current directory).")
@handle_errors
def download(url: str, output: str) -> None:
    """Download the audio of URL and convert it to WAV."""
    abort_signal = AbortSignal()
    with bind_os_signals(abort_signal):
        with console.status("[cyan]Downloading audio...[/cyan]") as status:

            def on_progress(progress: AudioProgress) -> None:
                if progress.stage == AudioStage.DOWNLOAD:
                    status.update(f"[cyan]Downloading... {progress.percent:g}%[/cyan]")
                elif progress.stage == AudioStage.CONVERT:
                    status.update("[cyan]Converting to WAV...[/cyan]")
                else:
                    status.update(f"[cyan]Saving to {progress.path}[/cyan]")

            path = AudioService.download_wav(
                url,
                output,
                progress_callback=on_progress,
                abort_signal=abort_signal,
            )
    quick_success(f"Saved to: {path}")


def main():
    cli(prog_name=CLI_NAME)


if __name__ == "__main__":
    main()
