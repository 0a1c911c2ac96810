from google import genai

# Upper bound on texts per embed_content request.
MAX_TEXTS_PER_REQUEST = 100


def _embed_config(task_type: str, dimensions: int | None) -> dict:
    config: dict = {"task_type": task_type}
    if dimensions:
        config["output_dimensionality"] = dimensions
    return config


async def generate_embedding(
    client: genai.Client,
    text: str,
    model: str,
    task_type: str = "RETRIEVAL_DOCUMENT",
    dimensions: int | None = None,
) -> list[float]:
    """Generate an embedding vector for the given text using Gemini."""
    result = await client.aio.models.embed_content(
        model=model,
        contents=text,
        config=_embed_config(task_type, dimensions),
    )
    return list(result.embeddings[0].values)


async def generate_embeddings(
    client: genai.Client,
    texts: list[str],
    model: str,
    task_type: str = "RETRIEVAL_DOCUMENT",
    dimensions: int | None = None,
) -> list[list[float]]:
    """Generate one embedding per text, in input order."""
    embeddings: list[list[float]] = []
    for start in range(0, len(texts), MAX_TEXTS_PER_REQUEST):
        batch = texts[start : start + MAX_TEXTS_PER_REQUEST]
        result = await client.aio.models.embed_content(
            model=model,
            contents=batch,
            config=_embed_config(task_type, dimensions),
        )
        if len(result.embeddings) != len(batch):
            raise ValueError(
                f"Embedding provider returned {len(result.embeddings)} vectors for {len(batch)} texts"
            )
        embeddings.extend(list(e.values) for e in result.embeddings)
    return embeddings
