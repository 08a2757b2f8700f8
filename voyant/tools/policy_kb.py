"""
Internal policy knowledge base.

Markdown documents under ``voyant/data/policies`` are split into sections
(one per ``##`` heading) and retrieved by keyword overlap. The LLM answers
from the retrieved sections only, citing them by number.
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from voyant.shared.llm.client import get_llm_response
from voyant.prompts.templates import POLICY_ANSWER_PROMPT


logger = logging.getLogger(__name__)

POLICY_DIR = Path(__file__).resolve().parent.parent / "data" / "policies"
SOURCE_NAME = "Internal Knowledge Base"
NO_ANSWER = "NO_ANSWER"
TOP_K = 3
MIN_SCORE = 2

_STOPWORDS = {
    "the", "and", "for", "are", "what", "can", "with", "how", "does", "do", "you",
    "need", "have", "about", "from", "this", "that", "there", "any", "will", "much",
    "many", "when", "where", "which", "should", "would", "could", "get", "my", "our",
}


class PolicySection(BaseModel):
    title: str
    heading: str
    text: str
    url: Optional[str] = None


class PolicyCitation(BaseModel):
    title: str
    url: Optional[str] = None
    snippet: str = ""


class PolicyAnswer(BaseModel):
    answer: str = ""
    citations: List[PolicyCitation] = Field(default_factory=list)


def _terms(text: str) -> List[str]:
    words = re.findall(r"[a-z][a-z\-]+", text.lower())
    return [w.rstrip("s") for w in words if len(w) > 2 and w not in _STOPWORDS]


def parse_policy_document(text: str) -> List[PolicySection]:
    """Split one markdown policy document into sections."""
    title_match = re.search(r"^#\s+(.+)$", text, re.MULTILINE)
    url_match = re.search(r"^Source:\s*(\S+)", text, re.MULTILINE)
    title = title_match.group(1).strip() if title_match else "Policy"
    url = url_match.group(1) if url_match else None

    sections = []
    for block in re.split(r"^##\s+", text, flags=re.MULTILINE)[1:]:
        heading, _, body = block.partition("\n")
        body = " ".join(body.split())
        if body:
            sections.append(PolicySection(title=title, heading=heading.strip(), text=body, url=url))
    return sections


@lru_cache(maxsize=1)
def load_sections(directory: str = str(POLICY_DIR)) -> List[PolicySection]:
    sections = []
    for path in sorted(Path(directory).glob("*.md")):
        sections.extend(parse_policy_document(path.read_text(encoding="utf-8")))
    logger.debug(f"Loaded {len(sections)} policy sections from {directory}")
    return sections


def search_policies(question: str, top_k: int = TOP_K) -> List[PolicySection]:
    """Return the best-matching sections, or an empty list when nothing is relevant."""
    query_terms = set(_terms(question))
    if not query_terms:
        return []
    min_score = 1 if len(query_terms) == 1 else MIN_SCORE

    scored = []
    for section in load_sections():
        section_terms = set(_terms(f"{section.title} {section.heading} {section.heading} {section.text}"))
        score = len(query_terms & section_terms)
        if score >= min_score:
            scored.append((score, section))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [section for _, section in scored[:top_k]]


def answer_policy_question(question: str) -> PolicyAnswer:
    """
    Answer a policy question from the knowledge base.

    Returns an empty PolicyAnswer when nothing relevant is found or the
    excerpts do not answer the question. LLM failures propagate.
    """
    sections = search_policies(question)
    logger.info(f"Policy lookup | question={question!r}, hits={len(sections)}")
    if not sections:
        return PolicyAnswer()

    excerpts = "\n\n".join(
        f"[{i + 1}] {s.title} / {s.heading}: {s.text}" for i, s in enumerate(sections)
    )
    answer = get_llm_response(POLICY_ANSWER_PROMPT.format(question=question, excerpts=excerpts)).strip()
    if not answer or NO_ANSWER in answer:
        logger.info("Policy excerpts did not answer the question")
        return PolicyAnswer()

    return PolicyAnswer(
        answer=answer,
        citations=[
            PolicyCitation(title=f"{s.title}: {s.heading}", url=s.url, snippet=s.text[:200])
            for s in sections
        ],
    )
