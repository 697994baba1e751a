"""Query pipeline — question → retrieve → forced tool call → structured answers."""

from __future__ import annotations

import logging

from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.errors import MalformedModelOutput
from policy_rag.llm.base import LLMProvider
from policy_rag.pipeline.prompts import ANSWER_TOOL, SYSTEM_PROMPT, build_messages
from policy_rag.pipeline.schemas import RAGQuery, RAGResponse, StructuredAnswer
from policy_rag.pipeline.structured import Malformed, parse_completion
from policy_rag.retrieval.retriever import Retriever
from policy_rag.retrieval.schemas import RetrievalConfig
from policy_rag.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)


class QueryPipeline:
    """Orchestrates question → retrieve → generate → parse."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        llm_provider: LLMProvider,
        retrieval_config: RetrievalConfig | None = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.retriever = Retriever(
            embedding_provider=embedding_provider,
            vector_store=vector_store,
        )
        self.llm_provider = llm_provider
        self.retrieval_config = retrieval_config or RetrievalConfig()
        self.system_prompt = system_prompt

    def query(self, rag_query: RAGQuery, strict: bool = False) -> RAGResponse:
        """Answer one question from the indexed corpus.

        Args:
            rag_query: The question, and optionally a model and result count.
            strict: Raise instead of degrading when the model output does
                not parse.

        Returns:
            A ``RAGResponse`` holding one or more ``StructuredAnswer``. When
            nothing relevant is retrieved the single answer is the
            insufficient-information answer and no model is called. When the
            model output is malformed the single answer is the apology.

        Raises:
            EmbeddingFailed, IndexUnavailable, GenerationFailed: A capability
                failed; there is no partial answer.
            MalformedModelOutput: Only with ``strict=True``.
        """
        model = rag_query.model or self.llm_provider.model
        config = self.retrieval_config
        if rag_query.top_k is not None:
            config = RetrievalConfig(
                top_k=rag_query.top_k,
                num_candidates=config.num_candidates,
                min_score=config.min_score,
            )

        retrieval = self.retriever.retrieve(rag_query.question, config=config)

        if not retrieval.results:
            logger.info("No evidence retrieved; answering with insufficient information")
            return RAGResponse(
                question=rag_query.question,
                answers=[StructuredAnswer.insufficient()],
                model=model,
                retrieval_count=0,
            )

        messages = build_messages(rag_query.question, retrieval.results, self.system_prompt)
        completion = self.llm_provider.complete(messages, ANSWER_TOOL, model=model)
        result = parse_completion(completion, ANSWER_TOOL.name)

        if isinstance(result, Malformed):
            if strict:
                raise MalformedModelOutput(result.reason)
            logger.warning("Malformed model output (%s); replying with apology", result.reason)
            return RAGResponse(
                question=rag_query.question,
                answers=[StructuredAnswer.apology()],
                sources=retrieval.results,
                model=completion.model,
                retrieval_count=len(retrieval.results),
                malformed=True,
            )

        logger.info(
            "Query answered: %d context chunks, %d answers",
            len(retrieval.results),
            len(result.answers),
        )
        return RAGResponse(
            question=rag_query.question,
            answers=result.answers,
            sources=retrieval.results,
            model=completion.model,
            retrieval_count=len(retrieval.results),
        )

    def answer(self, question: str, model: str | None = None) -> list[StructuredAnswer]:
        """Convenience wrapper returning only the answers."""
        return self.query(RAGQuery(question=question, model=model)).answers
