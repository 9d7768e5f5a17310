# backend/prdify/services/prompts.py
"""Prompt templates and response contracts for the generation steps."""
from typing import List, Sequence

from pydantic import BaseModel, Field

from ..models import Document, Question
from .completion_types import JsonSchema, ResponseSchema


# Response contracts

QUESTIONS_SCHEMA = JsonSchema(
    name="prd_questions_response",
    strict=True,
    schema=ResponseSchema(
        properties={
            "questions": {
                "type": "array",
                "description": "Clarifying questions, each with a recommended answer",
                "items": {
                    "type": "object",
                    "properties": {
                        "question": {"type": "string"},
                        "recommendation": {"type": "string"},
                    },
                    "required": ["question", "recommendation"],
                    "additionalProperties": False,
                },
            },
        },
        required=["questions"],
        additionalProperties=False,
    ),
)

SUMMARY_SCHEMA = JsonSchema(
    name="prd_summary_response",
    strict=True,
    schema=ResponseSchema(
        properties={
            "summary": {
                "type": "string",
                "description": "Summary of the planning session in markdown format",
            },
        },
        required=["summary"],
        additionalProperties=False,
    ),
)

DOCUMENT_SCHEMA = JsonSchema(
    name="prd_document_response",
    strict=True,
    schema=ResponseSchema(
        properties={
            "document": {
                "type": "string",
                "description": "The complete PRD document in markdown format",
            },
        },
        required=["document"],
        additionalProperties=False,
    ),
)


class GeneratedQuestion(BaseModel):
    question: str = Field(min_length=1)
    recommendation: str


class QuestionsResponse(BaseModel):
    questions: List[GeneratedQuestion] = Field(min_length=1)


class SummaryResponse(BaseModel):
    summary: str = Field(min_length=1)


class DocumentResponse(BaseModel):
    document: str = Field(min_length=1)


def format_question(question: str, recommendation: str) -> str:
    return f"{question}\n\nRecommendation: {recommendation}"


def project_description(document: Document) -> str:
    return (
        f"Application Name: {document.name}\n\n"
        f"Main Problem:\n{document.main_problem}\n\n"
        f"In Scope:\n{document.in_scope}\n\n"
        f"Out of Scope:\n{document.out_of_scope}\n\n"
        f"Success Criteria:\n{document.success_criteria}"
    )


def qa_transcript(questions: Sequence[Question]) -> str:
    return "\n\n".join(
        f"Q{index}: {q.question}\nA{index}: {q.answer}"
        for index, q in enumerate(questions, start=1)
    )


# Question rounds

QUESTIONS_SYSTEM_PROMPT = """You are an experienced product manager running a planning session for a new product. \
Your task is to ask clarifying questions that will help turn a rough project description into a complete \
Product Requirements Document (PRD).

Guidelines:
- Ask about gaps, ambiguities and risks in the description: users and personas, key flows, \
data, integrations, constraints, edge cases and how success is measured.
- Do not repeat questions that were already asked and answered.
- Each question must be specific and answerable in a few sentences.
- For every question provide a concise recommendation: the answer you would suggest given what is known.

Respond only with the requested JSON object."""


def build_questions_prompt(document: Document, history: Sequence[Question], count: int) -> str:
    parts = [
        "<project_description>",
        project_description(document),
        "</project_description>",
    ]

    if history:
        rounds = []
        for q in history:
            rounds.append(f"[Round {q.round_number}]\nQ: {q.question}\nA: {q.answer or '(no answer)'}")
        parts += [
            "",
            "<previous_rounds>",
            "\n\n".join(rounds),
            "</previous_rounds>",
        ]

    parts += [
        "",
        f"Generate {count} new clarifying questions with recommendations for the next round of the planning session.",
    ]
    return "\n".join(parts)


# Summary

SUMMARY_SYSTEM_PROMPT = """You are an experienced product manager. You summarise planning sessions \
for Product Requirement Documents. Capture the key insights, clarifications and refinements that emerged \
from the Q&A session and explain how the answers shaped the understanding of the requirements. \
Write the summary in markdown. Respond only with the requested JSON object."""


def build_summary_prompt(document: Document, questions: Sequence[Question]) -> str:
    return f"""Based on the following Product Requirement Document (PRD) information and the Q&A session \
that followed, generate a comprehensive summary of the planning session.

PRD Details:
Name: {document.name}
Main Problem: {document.main_problem}
In Scope: {document.in_scope}
Out of Scope: {document.out_of_scope}
Success Criteria: {document.success_criteria}

Q&A Session:
{qa_transcript(questions)}

Please provide a detailed summary that captures the key insights, clarifications, and refinements that \
emerged from the Q&A session."""


# Final document

def build_document_system_prompt(app_name: str) -> str:
    return f"""You are an experienced product manager whose task is to create a comprehensive Product \
Requirements Document (PRD) based on the provided project description and planning session summary.

1. Divide the PRD into these sections: Project Overview, User Problem, Functional Requirements, \
Project Boundaries, User Stories, Success Metrics.

2. In each section provide detailed and relevant information from the project description and the \
planning session summary. Use clear and concise language and keep the document consistent.

3. For user stories:
   - List ALL necessary user stories, including basic, alternative and edge case scenarios.
   - Give each user story a unique identifier (e.g. US-001).
   - Include a user story for secure access or authentication if the application needs it.
   - Make every user story testable.
   Use this structure for each story: ID, Title, Description, Acceptance Criteria.

4. Formatting:
   - Keep formatting and numbering consistent.
   - Do not use bold formatting in markdown ( ** ).
   - Format the PRD in proper markdown.

Use the following structure:

# Product Requirements Document (PRD) - {app_name}
## 1. Product Overview
## 2. User Problem
## 3. Functional Requirements
## 4. Product Boundaries
## 5. User Stories
## 6. Success Metrics

The final output should consist solely of the PRD in the specified markdown format."""


def build_document_prompt(document: Document) -> str:
    return f"""<project_description>
{project_description(document)}
</project_description>

<project_details>
{document.summary}
</project_details>

Generate a comprehensive Product Requirements Document (PRD) following the structure and guidelines \
provided in the system prompt."""
