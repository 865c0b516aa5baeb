"""
Workflow Orchestration
======================

Prompt composition and generation orchestration for storyboard panels.

Components:
- SceneOrchestrator: Generates panels singly or in sequential batches
- composer: Basic prompts and multimodal enhancement requests
- validator: Boundary checks for user input
"""

from .composer import build_basic_prompt, build_enhancement_parts
from .orchestrator import SceneOrchestrator, BatchReport
from .validator import (
    validate_character,
    validate_prompt,
    validate_reference_image,
    validate_scene_text,
)

__all__ = [
    "SceneOrchestrator",
    "BatchReport",
    "build_basic_prompt",
    "build_enhancement_parts",
    "validate_character",
    "validate_prompt",
    "validate_reference_image",
    "validate_scene_text",
]
