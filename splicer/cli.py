"""
splicer.cli - Typer CLI entry point.

Every command works on the project found by walking up from the current
directory, loads the live timeline, applies one edit through the
TimelineEditor and saves it back.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from splicer import __version__
from splicer.conflicts import summarize
from splicer.editor import TimelineEditor
from splicer.events import PLAYBACK_ENDED
from splicer.exceptions import SplicerError
from splicer.export.edl import generate_edl
from splicer.export.xmeml import generate_xmeml
from splicer.io import write_text
from splicer.logging import configure_logging
from splicer.models import Clip, ConflictInfo, Severity, Timeline
from splicer.playback import AsyncioScheduler, PlaybackClock, PlaybackState
from splicer.project import Project, find_project_dir
from splicer.storyboard import load_storyboard
from splicer.utils import format_duration, format_frame_time

app = typer.Typer(
    name="splicer",
    help="Timeline composition and conflict resolution for generated video clips.",
    add_completion=False,
)
transition_app = typer.Typer(help="Manage transitions between clips.")
version_app = typer.Typer(help="Save, list and restore timeline versions.")
app.add_typer(transition_app, name="transition")
app.add_typer(version_app, name="version")

console = Console()

SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"splicer {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Splicer - timeline composition and conflict resolution."""
    configure_logging(verbose)


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def open_project() -> tuple[Project, TimelineEditor]:
    project_dir = find_project_dir()
    if not project_dir:
        console.print("[red]Error: Not in a Splicer project directory[/red]")
        console.print("[dim]Run 'splicer init' first or cd into a project directory[/dim]")
        raise typer.Exit(1)

    project = Project(project_dir)
    try:
        config = project.load_config()
        timeline = project.load_timeline()
        transitions = project.load_transitions(config)
    except SplicerError as e:
        _fail(str(e))
    return project, TimelineEditor(timeline, config=config, transitions=transitions)


def save_project(project: Project, editor: TimelineEditor) -> None:
    project.save_timeline(editor.timeline)
    project.save_transitions(editor.transitions)


def report_conflicts(conflicts: list[ConflictInfo]) -> None:
    if not conflicts:
        console.print("[green]✓[/green] No conflicts")
        return

    table = Table(title="Timeline Conflicts")
    table.add_column("#", style="dim")
    table.add_column("Severity")
    table.add_column("Type", style="cyan")
    table.add_column("Clips")
    table.add_column("Message")
    table.add_column("Suggestion", style="dim")
    for i, conflict in enumerate(conflicts, 1):
        style = SEVERITY_STYLES[conflict.severity]
        table.add_row(
            str(i),
            f"[{style}]{conflict.severity.value}[/{style}]",
            conflict.type.value,
            " → ".join(conflict.affected_clips),
            conflict.message,
            conflict.suggested_fix or "",
        )
    console.print(table)
    counts = summarize(conflicts)
    console.print(
        f"{counts[Severity.ERROR]} error(s), {counts[Severity.WARNING]} warning(s), "
        f"{counts[Severity.INFO]} info"
    )


def print_timeline(timeline: Timeline) -> None:
    title = f"Timeline v{timeline.version}"
    if timeline.version_name:
        title += f" - {timeline.version_name}"
    table = Table(title=title)
    table.add_column("Track", style="cyan")
    table.add_column("Clip")
    table.add_column("Label")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("In/Out", justify="right", style="dim")
    for track in timeline.tracks:
        for clip in track.clips:
            table.add_row(
                track.id,
                clip.id,
                clip.label,
                format_frame_time(clip.start_time),
                format_frame_time(clip.end_time),
                f"{clip.in_point:.2f}-{clip.out_point:.2f}",
            )
    console.print(table)
    console.print(f"Total duration: {format_duration(timeline.total_duration())}")


# Project


@app.command("init")
def init_project(
    name: str = typer.Argument(..., help="Project name"),
    path: str = typer.Option(".", "--path", "-d", help="Directory to create project in"),
) -> None:
    """Create a new project with an empty video and audio track."""
    project_path = Path(path) / name
    if project_path.exists():
        _fail(f"Directory '{project_path}' already exists")

    try:
        Project(project_path).create()
    except SplicerError as e:
        _fail(f"creating project: {e}")

    console.print(f"[green]✓[/green] Created project '{name}'")
    console.print(f"[dim]  {project_path}[/dim]")


@app.command("show")
def show() -> None:
    """List tracks and clips."""
    _, editor = open_project()
    print_timeline(editor.timeline)


@app.command("seed")
def seed(
    shots_file: Path = typer.Argument(..., help="Storyboard JSON with shots and clips"),
    track_id: str = typer.Option("video-1", "--track", "-t", help="Track to place clips on"),
) -> None:
    """Place the selected clip of every shot in storyboard order and add shot transitions."""
    project, editor = open_project()
    try:
        placed, created = editor.seed(load_storyboard(shots_file), track_id)
    except (SplicerError, FileNotFoundError, ValueError) as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(
        f"[green]✓[/green] Placed {len(placed)} clip(s) and {len(created)} transition(s)"
    )


# Editing


@app.command("add-clip")
def add_clip(
    clip_id: str = typer.Argument(..., help="Clip id"),
    duration: float = typer.Option(..., "--duration", help="Source media length in seconds"),
    label: str = typer.Option("", "--label", "-l", help="Display label"),
    track_id: str = typer.Option("video-1", "--track", "-t", help="Track id"),
    start: float | None = typer.Option(None, "--start", help="Start time (default: end of track)"),
    shot_id: str | None = typer.Option(None, "--shot", help="Storyboard shot id"),
) -> None:
    """Add a clip to a track."""
    project, editor = open_project()
    try:
        clip = Clip(
            id=clip_id,
            label=label,
            out_point=duration,
            source_duration=duration,
            shot_id=shot_id,
            start_time=start or 0.0,
        )
        if start is None:
            editor.append_clip(track_id, clip)
        else:
            editor.add_clip(track_id, clip)
    except (SplicerError, ValueError) as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(f"[green]✓[/green] Added {clip_id} at {clip.start_time:.2f}s")
    report_conflicts(editor.conflicts())


@app.command("trim")
def trim(
    clip_id: str = typer.Argument(..., help="Clip id"),
    in_point: float = typer.Argument(..., help="New in point (seconds into source)"),
    out_point: float = typer.Argument(..., help="New out point (seconds into source)"),
) -> None:
    """Set a clip's in and out points."""
    project, editor = open_project()
    try:
        clip = editor.trim(clip_id, in_point, out_point)
    except SplicerError as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(
        f"[green]✓[/green] {clip_id}: in {clip.in_point:.2f}s, out {clip.out_point:.2f}s, "
        f"duration {clip.duration:.2f}s"
    )
    report_conflicts(editor.conflicts())


@app.command("move")
def move(
    clip_id: str = typer.Argument(..., help="Clip id"),
    start: float = typer.Argument(..., help="New start time in seconds"),
) -> None:
    """Move a clip to a new start time."""
    project, editor = open_project()
    try:
        editor.move(clip_id, start)
    except SplicerError as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(f"[green]✓[/green] Moved {clip_id} to {start:.2f}s")
    report_conflicts(editor.conflicts())


@app.command("reorder")
def reorder(
    dragged_id: str = typer.Argument(..., help="Clip to move"),
    target_id: str = typer.Argument(..., help="Clip whose slot it takes"),
    track_id: str = typer.Option("video-1", "--track", "-t", help="Track id"),
) -> None:
    """Move a clip into another clip's slot and close up the track."""
    project, editor = open_project()
    try:
        clips = editor.reorder(track_id, dragged_id, target_id)
    except SplicerError as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(f"[green]✓[/green] New order: {', '.join(c.id for c in clips)}")
    report_conflicts(editor.conflicts())


@app.command("remove-clip")
def remove_clip(clip_id: str = typer.Argument(..., help="Clip id")) -> None:
    """Remove a clip and its transitions."""
    project, editor = open_project()
    try:
        editor.remove_clip(clip_id)
    except SplicerError as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(f"[green]✓[/green] Removed {clip_id}")


# Conflicts


@app.command("check")
def check(
    shots_file: Path | None = typer.Option(
        None, "--shots", "-s", help="Storyboard JSON for order checks"
    ),
) -> None:
    """Report overlaps, gaps and clips out of storyboard order."""
    _, editor = open_project()
    if shots_file is not None:
        try:
            editor.use_storyboard(load_storyboard(shots_file))
        except (FileNotFoundError, ValueError) as e:
            _fail(str(e))
    report_conflicts(editor.conflicts())


@app.command("fix")
def fix(
    index: int | None = typer.Option(
        None, "--index", "-i", help="Fix only this conflict (number from 'check')"
    ),
) -> None:
    """Auto-fix overlaps by moving the later clip to the end of the earlier one."""
    project, editor = open_project()
    try:
        if index is None:
            moved = editor.fix_overlaps()
        else:
            conflicts = editor.conflicts()
            if not 1 <= index <= len(conflicts):
                _fail(f"No conflict #{index}")
            moved = [editor.fix_conflict(conflicts[index - 1])]
    except SplicerError as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(f"[green]✓[/green] Moved {len(moved)} clip(s)")
    report_conflicts(editor.conflicts())


# Transitions


@transition_app.command("add")
def transition_add(
    from_clip: str = typer.Argument(..., help="Outgoing clip id"),
    to_clip: str = typer.Argument(..., help="Incoming clip id"),
    type: str = typer.Option("dissolve", "--type", help="cut, dissolve, fade, wipe or slide"),
    duration: float | None = typer.Option(None, "--duration", help="Seconds (0 for cut)"),
) -> None:
    """Add or replace the transition between two clips."""
    project, editor = open_project()
    try:
        transition = editor.add_transition(from_clip, to_clip, type, duration)
    except (SplicerError, ValueError) as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(
        f"[green]✓[/green] {transition.id}: {transition.type.value} "
        f"{transition.duration:.2f}s at {transition.position:.2f}s"
    )


@transition_app.command("list")
def transition_list() -> None:
    """List transitions."""
    _, editor = open_project()
    table = Table(title="Transitions")
    table.add_column("Id", style="cyan")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Type")
    table.add_column("Duration", justify="right")
    table.add_column("Position", justify="right")
    for t in editor.transitions:
        table.add_row(
            t.id,
            t.from_clip_id,
            t.to_clip_id,
            t.type.value,
            f"{t.duration:.2f}",
            f"{t.position:.2f}",
        )
    console.print(table)


@transition_app.command("remove")
def transition_remove(transition_id: str = typer.Argument(..., help="Transition id")) -> None:
    """Remove a transition."""
    project, editor = open_project()
    try:
        editor.remove_transition(transition_id)
    except SplicerError as e:
        _fail(str(e))
    save_project(project, editor)
    console.print(f"[green]✓[/green] Removed {transition_id}")


# Versions


@version_app.command("save")
def version_save(name: str = typer.Argument(..., help="Version name")) -> None:
    """Save the live timeline as a named version."""
    project, editor = open_project()
    try:
        snapshot = project.save_version(editor.timeline, name)
    except SplicerError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Saved v{snapshot.version} - {name}")


@version_app.command("list")
def version_list() -> None:
    """List saved versions, newest first."""
    project, _ = open_project()
    table = Table(title="Versions")
    table.add_column("Version", style="cyan")
    table.add_column("Name")
    table.add_column("Saved", style="dim")
    table.add_column("Duration", justify="right")
    for snapshot in project.list_versions():
        table.add_row(
            f"v{snapshot.version}",
            snapshot.version_name or "",
            snapshot.saved_at.isoformat() if snapshot.saved_at else "",
            format_duration(snapshot.total_duration()),
        )
    console.print(table)


@version_app.command("restore")
def version_restore(version: int = typer.Argument(..., help="Version number")) -> None:
    """Replace the live timeline with a saved version."""
    project, editor = open_project()
    try:
        restored = project.restore_version(version, current=editor.timeline)
    except SplicerError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Restored v{version} as v{restored.version}")


# Export


@app.command("export")
def export(
    format: str = typer.Argument(..., help="edl, xml or json"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file"),
    fps: float | None = typer.Option(None, "--fps", help="Frame rate (default from config)"),
) -> None:
    """Export the timeline as a project file."""
    project, editor = open_project()
    fps = fps or editor.config.export_fps
    extensions = {"edl": "edl", "xml": "xml", "json": "json"}
    if format not in extensions:
        _fail(f"Unsupported format: {format}")

    try:
        if format == "edl":
            content = generate_edl(editor.timeline, editor.transitions, fps=fps, title=project.name)
        elif format == "xml":
            content = generate_xmeml(editor.timeline, fps=fps, name=project.name)
        else:
            content = editor.timeline.model_dump_json(indent=2)
    except SplicerError as e:
        _fail(str(e))

    if output is None:
        filename = f"{project.name}_v{editor.timeline.version}.{extensions[format]}"
        output = project.export_dir / filename
    write_text(output, content + "\n")
    console.print(f"[green]✓[/green] Exported {format.upper()} to {output}")


# Playback


@app.command("play")
def play(
    speed: float = typer.Option(1.0, "--speed", help="Playback speed multiplier"),
    start: float = typer.Option(0.0, "--from", help="Start position in seconds"),
) -> None:
    """Run the playback clock over the timeline and print the cursor as it moves."""
    _, editor = open_project()
    if editor.total_duration() <= 0:
        _fail("Timeline is empty")

    async def run() -> float:
        clock = PlaybackClock.from_config(
            editor.config, editor.total_duration, scheduler=AsyncioScheduler()
        )
        finished = asyncio.Event()
        clock.events.subscribe(PLAYBACK_ENDED, lambda cursor: finished.set())
        clock.set_speed(speed)
        clock.seek(start)
        clock.play()
        with console.status("Playing...") as status:
            while clock.state == PlaybackState.PLAYING:
                status.update(f"Playing {format_frame_time(clock.cursor)}")
                try:
                    await asyncio.wait_for(finished.wait(), timeout=0.25)
                except asyncio.TimeoutError:
                    continue
        return clock.cursor

    try:
        cursor = asyncio.run(run())
    except SplicerError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Played to {format_frame_time(cursor)}")


if __name__ == "__main__":
    app()
