from .composer import ScriptComposer
from .prompts import load_prompt, render_prompt
from .writer import MarkdownWriter

__all__ = ["ScriptComposer", "MarkdownWriter", "load_prompt", "render_prompt"]
