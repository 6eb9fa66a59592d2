"""
Response-time probe for the configured text model.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from loguru import logger

from shotscript.exceptions import ShotScriptException
from shotscript.providers.base import LLMProvider


@dataclass(frozen=True)
class LatencyPrompt:
    name: str
    prompt: str
    max_tokens: int


DEFAULT_PROMPTS = [
    LatencyPrompt("simple", "Say one sentence.", 50),
    LatencyPrompt("medium", "Summarise spring in three keywords.", 100),
    LatencyPrompt("complex", "Write a 100-word opening for a short-video script.", 200),
]


@dataclass
class LatencyResult:
    name: str
    success: bool
    elapsed_ms: Optional[float] = None
    usage: Optional[Dict[str, Any]] = None
    preview: str = ""
    error: Optional[str] = None

    @property
    def tokens_per_second(self) -> Optional[float]:
        if not self.usage or not self.elapsed_ms:
            return None
        total = self.usage.get("total_tokens")
        return total / (self.elapsed_ms / 1000) if total else None


@dataclass
class LatencyReport:
    results: List[LatencyResult] = field(default_factory=list)

    @property
    def successes(self) -> List[LatencyResult]:
        return [r for r in self.results if r.success]

    @property
    def average_ms(self) -> Optional[float]:
        times = [r.elapsed_ms for r in self.successes]
        return sum(times) / len(times) if times else None

    @property
    def min_ms(self) -> Optional[float]:
        return min((r.elapsed_ms for r in self.successes), default=None)

    @property
    def max_ms(self) -> Optional[float]:
        return max((r.elapsed_ms for r in self.successes), default=None)

    @property
    def average_tokens_per_second(self) -> Optional[float]:
        speeds = [r.tokens_per_second for r in self.successes if r.tokens_per_second]
        return sum(speeds) / len(speeds) if speeds else None

    def summary_lines(self) -> List[str]:
        if not self.successes:
            return ["All requests failed"]
        lines = [
            f"Succeeded: {len(self.successes)}/{len(self.results)}",
            f"Average: {self.average_ms:.0f}ms ({self.average_ms / 1000:.2f}s)",
            f"Fastest: {self.min_ms:.0f}ms",
            f"Slowest: {self.max_ms:.0f}ms",
        ]
        if self.average_tokens_per_second:
            lines.append(f"Average speed: ~{self.average_tokens_per_second:.2f} tokens/s")
        return lines


async def measure_response_times(
    llm_provider: LLMProvider,
    prompts: Optional[List[LatencyPrompt]] = None,
    pause_seconds: float = 1.0,
) -> LatencyReport:
    """Send each prompt in turn and time it. Failures are recorded, not raised."""
    prompts = prompts or DEFAULT_PROMPTS
    report = LatencyReport()

    for i, test in enumerate(prompts):
        logger.info(f"Latency test {i + 1}/{len(prompts)}: {test.name}")
        start = time.perf_counter()
        try:
            response = await llm_provider.chat_completion(
                [{"role": "user", "content": test.prompt}], max_tokens=test.max_tokens
            )
        except ShotScriptException as e:
            elapsed = (time.perf_counter() - start) * 1000
            logger.warning(f"  failed after {elapsed:.0f}ms: {e}")
            report.results.append(LatencyResult(name=test.name, success=False, elapsed_ms=elapsed, error=str(e)))
        else:
            elapsed = (time.perf_counter() - start) * 1000
            content = response.get("content") or ""
            logger.info(f"  {elapsed:.0f}ms, usage={response.get('usage')}")
            report.results.append(LatencyResult(
                name=test.name,
                success=True,
                elapsed_ms=elapsed,
                usage=response.get("usage"),
                preview=content[:50],
            ))

        # Space requests out to stay clear of rate limits
        if pause_seconds and i < len(prompts) - 1:
            await asyncio.sleep(pause_seconds)

    return report
