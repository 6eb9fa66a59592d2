from typing import Optional
from loguru import logger

from shotscript.pipeline.models import AnalysisContext, TranscriptionSuccess, TranscriptionUnavailable
from shotscript.providers.base import LLMProvider
from shotscript.script.prompts import TRANSCRIPT_MISSING_NOTE, load_prompt, render_prompt


def transcript_for_prompt(context: AnalysisContext) -> tuple:
    """(transcript text, note) for the prompt, decided by the transcription outcome type."""
    outcome = context.transcription
    if isinstance(outcome, TranscriptionSuccess):
        return outcome.text, ""
    if isinstance(outcome, TranscriptionUnavailable):
        return outcome.placeholder, TRANSCRIPT_MISSING_NOTE
    raise TypeError(f"Unexpected transcription outcome: {outcome!r}")


class ScriptComposer:
    """Writes the breakdown script, and optionally a rewrite, from an AnalysisContext."""

    def __init__(self, llm_provider: LLMProvider, prompts_dir: Optional[str] = None):
        self.llm_provider = llm_provider
        self.prompts_dir = prompts_dir

    def breakdown_prompt(self, context: AnalysisContext) -> str:
        metadata = context.metadata
        transcript, note = transcript_for_prompt(context)
        resolution = f"{metadata.width}x{metadata.height}" if metadata.width and metadata.height else "unknown"
        return render_prompt(
            load_prompt("breakdown", self.prompts_dir),
            url=context.url,
            duration=f"{metadata.duration:.1f}",
            resolution=resolution,
            frame_count=context.visual.frame_count,
            interval=f"{context.keyframes.interval:g}",
            visual_analysis=context.visual.text,
            transcript=transcript,
            transcript_note=note,
        )

    async def compose_breakdown(self, context: AnalysisContext) -> str:
        logger.info("Composing breakdown script")
        response = await self.llm_provider.chat_completion(
            [{"role": "user", "content": self.breakdown_prompt(context)}]
        )
        return response["content"]

    async def compose_rewrite(self, context: AnalysisContext, breakdown: str) -> str:
        logger.info("Composing rewritten script")
        transcript, _ = transcript_for_prompt(context)
        prompt = render_prompt(
            load_prompt("rewrite", self.prompts_dir),
            breakdown=breakdown,
            transcript=transcript,
            duration=f"{context.metadata.duration:.0f}",
        )
        response = await self.llm_provider.chat_completion([{"role": "user", "content": prompt}])
        return response["content"]
