"""
Baka Bot: Prompt Engine
=======================
Builds the completion prompt that coaxes the LLM into writing more
"Baka: ..." lines.

Key Features:
- External template loading from .md files
- {{placeholder}} substitution for label and syllable target
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union


DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "prompts"


class PromptEngine:
    """
    Loads the phrase prompt template and fills it in.

    The template ends with an open "{{label}}:" line so a plain completion
    model continues the list.

    Usage:
        engine = PromptEngine()
        prompt = engine.construct_prompt(label="Baka", target=5)
    """

    # Jinja2-style placeholder pattern
    PLACEHOLDER_PATTERN = re.compile(r'\{\{(\w+)\}\}')

    TEMPLATE_NAME = "phrase_prompt.md"

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the Prompt Engine.

        Args:
            template_dir: Directory containing .md template files.
        """
        self.template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
        self._template = self._load_template(self.TEMPLATE_NAME)

    def _load_template(self, filename: str) -> str:
        """
        Load a markdown template file.

        Raises:
            FileNotFoundError: If template file doesn't exist.
        """
        template_path = self.template_dir / filename

        if not template_path.exists():
            raise FileNotFoundError(
                f"Template not found: {template_path}\n"
                f"Expected templates in: {self.template_dir.absolute()}"
            )

        with open(template_path, 'r', encoding='utf-8') as f:
            return f.read()

    def _fill_template(self, template: str, values: dict) -> str:
        """Replace {{key}} with values[key]; unknown keys are left as-is."""
        def replace_placeholder(match):
            key = match.group(1)
            return str(values.get(key, match.group(0)))

        return self.PLACEHOLDER_PATTERN.sub(replace_placeholder, template)

    def construct_prompt(self, label: str = "Baka", target: int = 5) -> str:
        """
        Construct the completion prompt.

        Args:
            label: Literal label the phrases start with.
            target: Syllable count the phrases should have.

        Returns:
            Prompt text, trailing whitespace removed so the model continues
            right after the final label.
        """
        return self._fill_template(self._template, {"label": label, "target": target}).rstrip()


# =============================================================================
# CLI TESTING
# =============================================================================

if __name__ == "__main__":
    print("\n📝 Baka Bot: Prompt Engine")
    print("=" * 60)
    print(PromptEngine().construct_prompt())
    print("=" * 60)
