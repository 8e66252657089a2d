"""Prompt templates and registry metadata for the study companion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


PROMPT_REGISTRY_VERSION = "2025-06-01"


PROMPT_STUDY_PACK = """You are an expert study assistant. Analyze the following notes and create a comprehensive study pack.

Notes: {notes}

Based on the content analysis, create exactly {quiz_count} unique, high-quality quiz questions and {flashcard_count} flashcards that thoroughly test understanding of the material. The content appears to be {content_type} with {complexity} complexity level.

Focus on:
- Key concepts and definitions present in the content
- Important processes and mechanisms described
- Relationships and connections between ideas
- Applications and examples provided
- Critical thinking about the material
- Problem-solving scenarios if applicable

Respond with ONLY valid JSON in this exact format:
{{
  "summary": {{
    "overview": "A comprehensive 2-3 sentence overview of the main topics covered",
    "keyPoints": ["Point 1", "Point 2", "Point 3", "Point 4", "Point 5"],
    "definitions": [
      {{"term": "Term 1", "definition": "Definition 1"}},
      {{"term": "Term 2", "definition": "Definition 2"}},
      {{"term": "Term 3", "definition": "Definition 3"}}
    ],
    "importantConcepts": ["Concept 1", "Concept 2", "Concept 3", "Concept 4"]
  }},
  "flashcards": [
    {{"question": "Contextual question about key concept", "answer": "Brief answer"}}
  ],
  "quiz": [
    {{
      "question": "Question text here",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correct": 0,
      "explanation": "Brief explanation of why this is correct"
    }}
  ]
}}

CRITICAL REQUIREMENTS:
1. The "flashcards" array must contain exactly {flashcard_count} items.
2. The "quiz" array must contain exactly {quiz_count} items, each with exactly 4 options.
3. "correct" is the zero-based index (0-3) of the right option.
4. ALL questions must be specific to the provided content.
5. Make sure the JSON is properly formatted, without markdown fences or extra text."""

PROMPT_CONNECTIVITY_TEST = 'Respond with valid JSON: {"status": "working", "message": "API is functional"}'


@dataclass(frozen=True)
class PromptRecord:
    prompt_id: str
    name: str
    template: str


PROMPT_RECORDS: List[PromptRecord] = [
    PromptRecord("study_pack", "Study pack generation", PROMPT_STUDY_PACK),
    PromptRecord("connectivity_test", "Generation API connectivity test", PROMPT_CONNECTIVITY_TEST),
]


def build_study_prompt(text, analysis) -> str:
    return PROMPT_STUDY_PACK.format(
        notes=text,
        quiz_count=analysis.target_quiz_count,
        flashcard_count=analysis.target_flashcard_count,
        content_type=analysis.content_type,
        complexity=analysis.complexity,
    )


def get_prompt_metadata() -> Dict[str, object]:
    return {
        "version": PROMPT_REGISTRY_VERSION,
        "count": len(PROMPT_RECORDS),
        "ids": [record.prompt_id for record in PROMPT_RECORDS],
    }
