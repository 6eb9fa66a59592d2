import os
from datetime import datetime
from typing import Optional
from loguru import logger

from shotscript.pipeline.models import AnalysisContext


class MarkdownWriter:
    """Renders composed scripts as Markdown files under ``output_dir``."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir
        os.makedirs(self.output_dir, exist_ok=True)

    def render(self, context: AnalysisContext, title: str, body: str) -> str:
        metadata = context.metadata
        lines = [
            f"# {title}",
            "",
            f"- Source: {context.url}",
            f"- Duration: {metadata.duration:.1f}s",
        ]
        if metadata.width and metadata.height:
            lines.append(f"- Resolution: {metadata.width}x{metadata.height}")
        lines += [
            f"- Keyframes: {len(context.keyframes)} (every {context.keyframes.interval:g}s, "
            f"{context.visual.frame_count} analysed)",
            f"- Transcript: {'available' if context.transcript_available else 'unavailable'}",
            f"- Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "---",
            "",
            body.strip(),
            "",
        ]
        return "\n".join(lines)

    def write(self, context: AnalysisContext, breakdown: str, rewrite: Optional[str] = None) -> str:
        """Write the breakdown (and rewrite, if given); returns the path of the last file written."""
        path = self._save(f"{context.key}-breakdown.md", self.render(context, "Shot Breakdown", breakdown))
        if rewrite is not None:
            path = self._save(f"{context.key}-rewrite.md", self.render(context, "Rewritten Script", rewrite))
        return path

    def _save(self, filename: str, content: str) -> str:
        path = os.path.join(self.output_dir, filename)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"Saved {path}")
        return path
