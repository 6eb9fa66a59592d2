"""
Prompt templates for the model calls.

Templates use ``string.Template`` placeholders (``$name``). A file named
``<template name>.md`` in the configured prompts directory overrides the
built-in text of the same name.
"""

import os
from string import Template
from typing import Optional
from loguru import logger

SHOT_ANALYSIS_PROMPT = """You are a professional short-video editor.
The $frame_count images below are keyframes from one video, in chronological order.
Frame N (counting from 1) was captured at (N - 1) x $interval seconds. Total duration: $duration seconds.

Frame timestamps:
$timestamps

Identify every shot (a continuous span between two cuts or camera changes). For each shot give:
1. Shot number and time range (start-end in seconds)
2. Shot size (extreme close-up / close-up / medium / full / wide)
3. Camera movement (static / push / pull / pan / tilt / tracking / handheld)
4. Visual content: subject, action, setting
5. On-screen text or captions, if any
6. Transition into the next shot

Finish with a short summary of the overall visual style, pacing and colour tone."""

TRANSCRIPTION_PROMPT = (
    "Transcribe the speech in this audio verbatim. "
    "Return only the spoken words, without commentary or timestamps."
)

BREAKDOWN_PROMPT = """You are a short-video script analyst. Using the material below, write a complete
shot-by-shot breakdown script in Markdown.

## Video information
- Source: $url
- Duration: $duration seconds
- Resolution: $resolution
- Keyframes analysed: $frame_count (one every $interval seconds)

## Visual analysis
$visual_analysis

## Audio transcript
$transcript

$transcript_note

Produce:
1. A one-paragraph synopsis (topic, hook, target audience)
2. A shot table with columns: # | Time | Shot size | Camera | Visuals | Voice-over / dialogue | On-screen text
3. A structure analysis (hook, development, climax, call to action) with timestamps
4. Three techniques worth reusing"""

REWRITE_PROMPT = """You are a creative short-video scriptwriter. Below is the breakdown of an existing
video. Write a new, original script that keeps its structure and pacing but changes the
wording, scenes and examples so it is not a copy.

## Original breakdown
$breakdown

## Source transcript
$transcript

Output a Markdown script with: a title, a hook for the first 3 seconds, a shot table
(# | Duration | Visuals | Voice-over | On-screen text), and a closing call to action.
Keep the total length close to $duration seconds."""

TRANSCRIPT_MISSING_NOTE = (
    "Note: no audio transcript is available. Infer narration only from on-screen text "
    "and visuals, and mark voice-over cells as (not available)."
)

_BUILTIN = {
    "shot_analysis": SHOT_ANALYSIS_PROMPT,
    "transcription": TRANSCRIPTION_PROMPT,
    "breakdown": BREAKDOWN_PROMPT,
    "rewrite": REWRITE_PROMPT,
}


def load_prompt(name: str, prompts_dir: Optional[str] = None) -> str:
    """Template text for ``name``, preferring ``<prompts_dir>/<name>.md`` when it exists."""
    if prompts_dir:
        path = os.path.join(prompts_dir, f"{name}.md")
        if os.path.isfile(path):
            logger.debug(f"Loading prompt override {path}")
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
    if name not in _BUILTIN:
        raise KeyError(f"Unknown prompt template: {name}")
    return _BUILTIN[name]


def render_prompt(template: str, **values) -> str:
    # safe_substitute leaves unknown $placeholders in override files untouched
    return Template(template).safe_substitute(**{k: str(v) for k, v in values.items()})
