"""
Answer orchestration: retrieve context for a question and ask the LLM.

The generated text is returned verbatim, without post-processing or
citation mapping.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from askdocs.retrieval.retriever import RetrievedChunk

if TYPE_CHECKING:
    from askdocs.retrieval.resources import Resources

logger = logging.getLogger(__name__)


QA_PROMPT = (
    "Answer the question as truthfully as possible using the provided text, "
    'and if the answer is not contained within the text below, say "I don\'t know"\n\n'
    "Context: {context}\n\n"
    "Q: {question}\nA:"
)


@dataclass
class Answer:
    """Result of a question-answering call."""

    question: str
    text: str
    chunks: list[RetrievedChunk] = field(default_factory=list)


def build_prompt(context_chunks: list[str], question: str) -> str:
    """Embed the context chunks and the literal question in the QA prompt."""
    return QA_PROMPT.format(context=" ".join(context_chunks), question=question)


def answer_query(question: str, resources: "Resources", max_context_bytes: int) -> Answer:
    """
    Answer ``question`` from the indexed documents.

    Args:
        question: Natural language question
        resources: Loaded retriever and provider clients
        max_context_bytes: Byte budget for retrieved context

    Returns:
        Answer with the raw generated text and the chunks used as context

    Raises:
        ProviderError: If embedding or generation fails
        DimensionMismatchError: If the query embedding does not match the index
        DocumentUnreadableError: If a source document cannot be re-read
    """
    query_vector = resources.embed_query(question)
    chunks = resources.retriever.search(query_vector, max_context_bytes)
    logger.debug(f"Retrieved {len(chunks)} chunks for question: {question!r}")

    prompt = build_prompt([c.text for c in chunks], question)
    text = resources.llm.invoke(prompt)

    return Answer(question=question, text=text, chunks=chunks)
