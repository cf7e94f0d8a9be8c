#!/usr/bin/env python3
"""
VoiceReel - Main Entry Point
Turns a recorded narration into a timed, multi-scene video timeline
(transcript segments, generated images, subtitles).
"""

import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn
from rich.table import Table
from dotenv import load_dotenv

# Load local env for API keys
load_dotenv(dotenv_path=Path(__file__).parent / ".env.local")

from voicereel.utils.config import Config
from voicereel.utils.logger import setup_logging
from voicereel.utils.timecode import format_time
from voicereel.services import create_services
from voicereel.media_generation.audio_asset import open_audio_file
from voicereel.media_generation.errors import PipelineAbandoned, VoiceReelError
from voicereel.media_generation.media_models import Timeline, VideoDetails
from voicereel.media_generation.media_pipeline import PipelineController
from voicereel.video_assembly.timeline_builder import total_frames, write_timeline_artifacts

console = Console()


class VoiceReelSystem:
    """Main system coordinator for narration-to-video generation"""

    def __init__(self, config_path: str = "configs/config.yaml", offline: bool = False):
        self.config = Config.load(config_path)
        if offline:
            self._apply_offline_config()
            console.print("[yellow]🧪[/yellow] Offline mode - stub services, no network calls")

        self.logger = setup_logging(self.config, console=console)

    def _apply_offline_config(self):
        """Swap every capability for its deterministic stub"""
        self.config.transcription.engine = "stub"
        self.config.prompt_generation.engine = "stub"
        self.config.image_generation.engine = "stub"

    async def generate_timeline(self, audio_path: str, details: VideoDetails) -> Timeline:
        """Run one generation session for a narration file"""
        console.print(f"[blue]🎬[/blue] Generating '{details.title}' from {audio_path}")
        console.print(f"[green]🎨[/green] Style: {details.style}  [green]📐[/green] Aspect: {details.aspect_ratio.value}")

        async with create_services(self.config) as services:
            with open_audio_file(audio_path) as audio, Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
                TimeElapsedColumn(),
                console=console,
                refresh_per_second=4,
                transient=False
            ) as progress:
                task = progress.add_task("[cyan]🎙️ Starting...", total=100)

                def progress_callback(percent, message):
                    progress.update(task, completed=percent, description=f"[cyan]{message}")

                controller = PipelineController.from_config(
                    self.config, services, details=details, progress_callback=progress_callback
                )
                try:
                    timeline = await controller.run(audio)
                except (KeyboardInterrupt, asyncio.CancelledError):
                    controller.abandon()
                    raise

                artifacts_dir = Path(self.config.paths.artifacts) / controller.state.session_id
                paths = write_timeline_artifacts(timeline, self.config.video.fps, str(artifacts_dir))

        self._print_summary(timeline)
        console.print(f"[green]💾[/green] Timeline: {paths['timeline']}")
        console.print(f"[green]💬[/green] Subtitles: {paths['subtitles']}")
        return timeline

    def _print_summary(self, timeline: Timeline):
        """Generated content summary: scenes, prompts, images, degraded segments"""
        fps = self.config.video.fps
        console.print("\n[bold green]🎉 Timeline ready![/bold green]")
        console.print(
            f"[green]⏱️[/green] Duration: {format_time(timeline.duration_seconds)} "
            f"({total_frames(timeline, fps)} frames @ {fps} fps)"
        )

        transcript = " ".join(seg.text for seg in timeline.segments)
        console.print(f"[blue]📝[/blue] Transcript: {transcript or '(no speech detected)'}")

        table = Table(title="Generated Scenes")
        table.add_column("Scene", justify="right")
        table.add_column("Time")
        table.add_column("Caption")
        table.add_column("Prompt")
        table.add_column("Image")
        for idx, seg in enumerate(timeline.segments, start=1):
            if seg.image:
                status = "[red]flagged[/red]" if seg.image.flagged else "[green]ok[/green]"
            else:
                kind = seg.failure.kind.value if seg.failure else "missing"
                status = f"[yellow]{kind}[/yellow]"
            table.add_row(
                str(idx),
                f"{format_time(seg.start_seconds)}-{format_time(seg.end_seconds)}",
                seg.text[:60],
                (seg.prompt or "-")[:60],
                status,
            )
        console.print(table)

        degraded = timeline.degraded_segments
        if degraded:
            console.print(f"[yellow]⚠[/yellow] {len(degraded)} scene(s) without image: {degraded}")
        flagged = timeline.flagged_segments
        if flagged:
            console.print(f"[red]⚠[/red] {len(flagged)} image(s) flagged by content policy: {flagged}")


def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="VoiceReel narration-to-video generator")
    parser.add_argument("--audio", type=str, required=True, help="Path to the narration audio file")
    parser.add_argument("--config", type=str, default="configs/config.yaml",
                       help="Path to configuration file")
    parser.add_argument("--title", type=str, default="Untitled narration", help="Video title")
    parser.add_argument("--description", type=str, help="Optional video description")
    parser.add_argument("--style", type=str, help="Art style (anime, sketch, watercolor, minimal, 3d, realistic)")
    parser.add_argument("--aspect", choices=["16:9", "1:1", "9:16"], help="Screen size")
    parser.add_argument("--fps", type=int, help="Frames per second for display intervals")
    parser.add_argument("--workers", type=int, help="Concurrent segment workers (1 = sequential)")
    parser.add_argument("--offline", action="store_true",
                       help="Use deterministic stub services instead of the network")

    args = parser.parse_args()

    try:
        system = VoiceReelSystem(args.config, offline=args.offline)
        config = system.config

        if args.fps:
            config.video.fps = args.fps
        if args.workers:
            config.enrichment.max_workers = args.workers

        style = args.style or config.image_generation.style
        if not config.is_style_supported(style):
            console.print(f"[yellow]⚠[/yellow] Style '{style}' not configured.")
            console.print(f"[yellow]💡[/yellow] Available styles: {', '.join(config.get_available_styles())}")
            style = config.image_generation.style

        details = VideoDetails(
            title=args.title,
            description=args.description,
            style=style,
            aspect_ratio=args.aspect or config.video.aspect_ratio,
        )
        asyncio.run(system.generate_timeline(args.audio, details))

    except (KeyboardInterrupt, PipelineAbandoned):
        console.print("\n[yellow]⏹️[/yellow] Stopped by user")
    except VoiceReelError as e:
        console.print(f"[red]❌[/red] Generation failed: {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]💥[/red] Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
