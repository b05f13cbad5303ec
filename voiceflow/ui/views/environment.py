from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from voiceflow.schemas.dependencies import OPTIONAL_DEPENDENCIES, DependencyInfo
from voiceflow.schemas.environment import EnvironmentReport
from voiceflow.schemas.recommendation import Recommendation
from voiceflow.services.environment_service import EnvironmentService
from voiceflow.services.recommendation_service import RecommendationService
from voiceflow.utils.console import console as default_console
from voiceflow.utils.units import format_bytes

PLATFORM_NAMES = {"darwin": "macOS", "linux": "Linux", "windows": "Windows"}

DEPENDENCY_ROWS = (
    ("git", "Git"),
    ("cmake", "CMake"),
    ("compiler", "Compiler"),
    ("python", "Python"),
    ("make", "Make"),
)


def platform_name(os_name: str) -> str:
    return PLATFORM_NAMES.get(os_name, "Unknown")


def status_text(info: Optional[DependencyInfo]) -> str:
    if info is not None and info.available:
        version = f" [dim]{info.version}[/dim]" if info.version else ""
        return f"[green]✓ installed[/green]{version}"
    return "[red]✗ not installed[/red]"


def _section(title: str) -> Table:
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2), title=title,
                  title_justify="left", title_style="bold cyan")
    table.add_column(style="blue", no_wrap=True, width=14)
    table.add_column()
    return table


def system_table(env: EnvironmentReport) -> Table:
    table = _section("🖥️  System")
    table.add_row("OS", f"{platform_name(env.platform)} ({env.arch})")
    table.add_row("Python", env.python_version)
    table.add_row("Memory", f"{env.memory_gb} GB")
    if env.network_ok is not None:
        table.add_row("Network", "[green]reachable[/green]" if env.network_ok else "[red]unreachable[/red]")
    return table


def hardware_table(env: EnvironmentReport) -> Table:
    hardware = env.hardware
    table = _section("🔧 Hardware")

    cpu = hardware.cpu
    table.add_row("CPU", f"{cpu.model} ({cpu.physical_cores} cores, {cpu.logical_threads} threads)")
    table.add_row(
        "Memory",
        f"{format_bytes(hardware.memory.total_bytes)} total, "
        f"{format_bytes(hardware.memory.available_bytes)} available",
    )

    if hardware.has_gpu:
        gpu = hardware.gpu
        name = " ".join(part for part in (gpu.vendor, gpu.model) if part) or "Unknown GPU"
        features = f" ({', '.join(gpu.features)})" if gpu.features else ""
        table.add_row("GPU", f"[magenta]{name}[/magenta]{features}")
        if gpu.vram_mb:
            table.add_row("VRAM", f"{gpu.vram_mb} MB")
    else:
        table.add_row("GPU", "[dim]no dedicated GPU detected[/dim]")

    table.add_row(
        "Disk",
        f"{format_bytes(hardware.disk.total_bytes)} total, "
        f"{format_bytes(hardware.disk.available_bytes)} available",
    )
    return table


def dependency_table(env: EnvironmentReport) -> Table:
    table = _section("📦 Dependencies")
    for key, label in DEPENDENCY_ROWS:
        info = env.dependencies.get(key)
        if key in OPTIONAL_DEPENDENCIES:
            if info is None:
                continue
            if not info.available:
                table.add_row(label, "[yellow]- not installed (optional)[/yellow]")
                continue
        table.add_row(label, status_text(info))
    return table


def recommendation_table(recommendation: Recommendation) -> Table:
    table = _section("🎤 Whisper recommendation")
    table.add_row("Model", recommendation.model_size.value)
    table.add_row("Backend", recommendation.backend.value)
    table.add_row("Threads", str(recommendation.thread_count))
    table.add_row("Acceleration", "yes" if recommendation.use_acceleration else "no")
    return table


def display_environment_summary(env: EnvironmentReport, console: Optional[Console] = None) -> None:
    console = console or default_console

    console.print()
    console.rule("[cyan]Environment[/cyan]", style="bright_black")
    console.print(system_table(env))
    console.print(hardware_table(env))
    console.print(dependency_table(env))

    warnings = EnvironmentService.get_warnings(env)
    if warnings:
        console.print("[yellow]⚠️  Warnings[/yellow]")
        for warning in warnings:
            console.print(f"[yellow]  • {warning}[/yellow]")
        console.print()

    suggestions = EnvironmentService.get_suggestions(env)
    if suggestions:
        console.print("[green]💡 Suggestions[/green]")
        for suggestion in suggestions:
            console.print(f"[green]  • {suggestion}[/green]")
        console.print()

    console.print(recommendation_table(RecommendationService.recommend(env.hardware)))
    console.rule(style="bright_black")
