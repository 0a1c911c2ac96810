import asyncio
import logging
from pathlib import Path

from google import genai

from ragvec.schemas.document import Document
from ragvec.services.search_service import search_documents
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_TEMPLATE = """DOCUMENTS:
{documents}

QUESTION:
{question}

INSTRUCTIONS:
Answer the users question using the DOCUMENTS text above.
Keep your answer ground in the facts of the DOCUMENTS.
If the DOCUMENTS doesn't contain the facts to answer the QUESTION, return:
I'm sorry but I haven't enough information to answer.
"""


def load_prompt_template(path: str | None) -> str:
    """Read the prompt template from disk, falling back to the built-in one."""
    if not path:
        return DEFAULT_PROMPT_TEMPLATE
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Cannot read prompt template %s, using default: %s", path, e)
        return DEFAULT_PROMPT_TEMPLATE


async def load_prompt_template_async(path: str | None) -> str:
    return await asyncio.to_thread(load_prompt_template, path)


def build_context(documents: list[Document]) -> str:
    return "".join(f"{doc.id}.\n<article>\n{doc.text}\n</article>\n" for doc in documents)


def render_prompt(template: str, documents: list[Document], question: str) -> str:
    # Templates may contain other literal braces.
    return template.replace("{documents}", build_context(documents)).replace(
        "{question}", question
    )


async def generate_answer(client: genai.Client, prompt: str, model: str) -> str:
    response = await client.aio.models.generate_content(model=model, contents=prompt)
    return response.text or ""


async def answer_question(
    store: VectorStore,
    client: genai.Client,
    question: str,
    model: str,
    embedding_model: str,
    dimensions: int,
    top_k: int = 4,
    template: str = DEFAULT_PROMPT_TEMPLATE,
) -> str:
    """Retrieve the closest documents and ask Gemini to answer from them."""
    documents = await search_documents(
        store, client, question, embedding_model, dimensions, top_k=top_k
    )
    prompt = render_prompt(template, documents, question)
    logger.debug("RAG prompt built from %d documents", len(documents))
    return await generate_answer(client, prompt, model)
