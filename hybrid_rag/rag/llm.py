"""Prompts for answer generation."""
from __future__ import annotations

NO_ANSWER = "I don't have enough information to answer that question."

DEFAULT_SYSTEM_PROMPT = """You are a careful assistant that answers questions from a document collection.
Answer based ONLY on the information provided in the Context below.
Follow these guidelines:
1. Use all relevant information from the context and give specific details
2. If the context names methods, systems or terms, explain them fully
3. Structure the answer logically
4. If the context does not contain enough information, say clearly what is missing
5. Do not make up information or draw on knowledge outside the context
Context sections start with a citation such as [guide.md #3]. Cite the sections you use."""


def build_context_block(context: str) -> str:
    return f"Context:\n{context}" if context else ""


def build_question_block(question: str) -> str:
    return f"Question: {question}\n\nAnswer:"
