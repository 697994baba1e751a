"""CLI entry point — Typer app for policy-rag commands.

Usage:
    policy-rag ingest corpus/ --no-recreate
    policy-rag query "How much vacation can I carry over?"
    policy-rag ask "Who approves remote work?" --command /policy3
    policy-rag feedback 1700000000.000100 thumbs_up
    policy-rag init-log
    policy-rag status
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from policy_rag.config import Settings, load_settings
from policy_rag.errors import IngestionIOError, LoggingFailed, PolicyRagError

app = typer.Typer(
    name="policy-rag",
    help="University policy assistant — ingest, query, feedback.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_INGEST_PATH = typer.Argument(..., help="Corpus root or section directory")


# ---------------------------------------------------------------------------
# Wiring: one configuration-bound instance per capability
# ---------------------------------------------------------------------------


def _settings(ctx: typer.Context) -> Settings:
    obj = ctx.obj or {}
    return load_settings(obj.get("config"))


def _build_embedding(settings: Settings):
    from policy_rag.embeddings.factory import get_embedding_provider

    cfg = settings.embedding
    kwargs: dict[str, Any] = {"model": cfg.model}
    if cfg.provider != "huggingface":
        kwargs["dimension"] = cfg.dimension
    return get_embedding_provider(cfg.provider, **kwargs)


def _build_store(settings: Settings, dimension: int):
    from policy_rag.vectorstore.factory import get_vector_store

    cfg = settings.vectorstore
    kwargs: dict[str, Any] = {"index_name": cfg.index_name, "dimension": dimension}
    if cfg.backend == "opensearch":
        kwargs.update(
            url=cfg.url,
            username=cfg.username,
            password=cfg.password,
            region=cfg.region,
            aws_sigv4=cfg.aws_sigv4,
        )
    elif cfg.backend == "qdrant":
        if cfg.qdrant_url:
            kwargs.update(url=cfg.qdrant_url, api_key=cfg.qdrant_api_key)
        else:
            kwargs["path"] = cfg.path
    else:
        kwargs["path"] = cfg.path
    return get_vector_store(cfg.backend, **kwargs)


def _build_llm(settings: Settings):
    from policy_rag.llm.factory import get_llm_provider

    cfg = settings.llm
    return get_llm_provider(
        cfg.provider,
        model=cfg.model,
        temperature=cfg.temperature,
        max_tokens=cfg.max_tokens,
    )


def _build_interaction_log(settings: Settings):
    from policy_rag.interactions.factory import get_interaction_log

    cfg = settings.interaction_log
    if cfg.backend == "opensearch":
        vs = settings.vectorstore
        return get_interaction_log(
            "opensearch",
            index_name=cfg.index_name,
            url=vs.url,
            username=vs.username,
            password=vs.password,
            region=vs.region,
            aws_sigv4=vs.aws_sigv4,
        )
    return get_interaction_log(cfg.backend)


def _build_query_pipeline(settings: Settings):
    from policy_rag.pipeline.query import QueryPipeline
    from policy_rag.retrieval.schemas import RetrievalConfig

    emb = _build_embedding(settings)
    store = _build_store(settings, emb.dimension)
    r = settings.retrieval
    return QueryPipeline(
        embedding_provider=emb,
        vector_store=store,
        llm_provider=_build_llm(settings),
        retrieval_config=RetrievalConfig(
            top_k=r.top_k,
            num_candidates=r.num_candidates,
            min_score=r.min_score,
        ),
    )


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> None:
    err_console.print(f"[bold red]Error:[/] {message}")
    raise typer.Exit(code=1)


def _print_answers(answers, plain: bool) -> None:
    from policy_rag.delivery.formatter import to_plain_text

    if plain:
        console.print(to_plain_text(answers), markup=False, highlight=False)
        return

    for answer in answers:
        console.print(f"\n[bold green]A:[/] {answer.content}")
        if answer.citations:
            console.print("\n[bold]Citations[/]")
            for c in answer.citations:
                console.print(f"  • {c.title} — {c.url}", markup=False)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Settings YAML (default: settings.yaml lookup)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging and remember the settings file for subcommands."""
    _configure_logging(verbose)
    ctx.obj = {"config": config}


@app.command()
def ingest(
    ctx: typer.Context,
    path: Annotated[Path, _INGEST_PATH],
    recreate: bool | None = typer.Option(
        None, "--recreate/--no-recreate",
        help="Drop and recreate the index first (default from settings)",
    ),
    batch_size: int | None = typer.Option(
        None, "--batch-size", "-b", help="Chunks embedded and stored per batch",
    ),
) -> None:
    """Ingest a policy corpus into the vector index."""
    from policy_rag.chunking.recursive_chunker import RecursiveChunker
    from policy_rag.documents.loader import CorpusLoader
    from policy_rag.pipeline.ingest import IngestPipeline

    settings = _settings(ctx)
    ing = settings.ingestion
    ch = settings.chunking

    emb = _build_embedding(settings)
    store = _build_store(settings, emb.dimension)
    pipeline = IngestPipeline(
        embedding_provider=emb,
        vector_store=store,
        chunker=RecursiveChunker(
            min_chars=ch.min_chars,
            max_chars=ch.max_chars,
            overlap_chars=ch.overlap_chars,
            separators=ch.separators,
        ),
        loader=CorpusLoader(
            metadata_filename=ing.metadata_filename,
            ignored_classifications=ing.ignored_classifications,
            scope_map=ing.scope_map,
            default_scope=ing.default_scope,
        ),
        batch_size=batch_size or ing.batch_size,
    )

    try:
        report = pipeline.ingest(
            path, recreate=ing.recreate_index if recreate is None else recreate,
        )
    except IngestionIOError as exc:
        _fail(str(exc))
    except PolicyRagError as exc:
        _fail(f"Ingestion stopped: {exc}")

    console.print(f"\n[bold green]Ingested:[/] {path}")
    console.print(f"  Documents: {report.documents_loaded}")
    console.print(f"  Filtered: {report.documents_filtered}")
    console.print(f"  Skipped: {report.documents_skipped}")
    console.print(f"  Chunks: {report.chunks_created}")
    console.print(f"  Stored: {report.chunks_stored} in {report.batches_written} batches")

    for w in report.warnings:
        console.print(f"  [yellow]Warning:[/] {w}")


@app.command()
def query(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question to ask"),
    model: str | None = typer.Option(None, "--model", "-m", help="Generation model"),
    top_k: int | None = typer.Option(
        None, "--top-k", "-k", help="Number of evidence chunks",
    ),
    plain: bool = typer.Option(False, "--plain", help="Chat plain-text rendering"),
    strict: bool = typer.Option(
        False, "--strict", help="Fail instead of apologising on malformed model output",
    ),
) -> None:
    """Answer a question from the indexed corpus (not logged)."""
    from policy_rag.pipeline.schemas import RAGQuery

    settings = _settings(ctx)
    pipeline = _build_query_pipeline(settings)

    try:
        response = pipeline.query(
            RAGQuery(question=question, model=model, top_k=top_k), strict=strict,
        )
    except PolicyRagError as exc:
        _fail(f"{type(exc).__name__}: {exc}")

    console.print(f"\n[bold]Q:[/] {response.question}")
    _print_answers(response.answers, plain)
    console.print(
        f"\n[dim]Model: {response.model} "
        f"| Evidence chunks: {response.retrieval_count}[/]",
    )


@app.command()
def ask(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question, as typed in chat"),
    command: str | None = typer.Option(
        None, "--command", help="Chat command selecting the model, e.g. /policy3",
    ),
    user_id: str = typer.Option(os.getenv("USER", "cli"), "--user", help="Requester id"),
    plain: bool = typer.Option(False, "--plain", help="Chat plain-text rendering"),
) -> None:
    """Answer a question the way the chat surface does, logging the interaction."""
    from policy_rag.assistant import PolicyAssistant, QuestionRequest, Reply
    from policy_rag.interactions.schemas import InteractionType

    settings = _settings(ctx)
    assistant = PolicyAssistant(
        query_pipeline=_build_query_pipeline(settings),
        interaction_log=_build_interaction_log(settings),
        command_models=settings.llm.command_models,
    )
    interaction_id = f"{time.time():.6f}"

    def deliver(reply: Reply) -> None:
        if reply.blocks is None or plain:
            console.print(reply.text, markup=False, highlight=False)
        else:
            console.print_json(data=reply.blocks)

    assistant.handle_question(
        QuestionRequest(
            interaction_id=interaction_id,
            text=question,
            user_id=user_id,
            interaction_type=InteractionType.COMMAND,
            command=command,
        ),
        deliver,
    )
    console.print(f"\n[dim]Interaction: {interaction_id}[/]")


@app.command()
def feedback(
    ctx: typer.Context,
    interaction_id: str = typer.Argument(..., help="Interaction id"),
    signal: str = typer.Argument(..., help="thumbs_up or thumbs_down"),
) -> None:
    """Record feedback on a logged interaction."""
    from policy_rag.delivery.formatter import FeedbackSignal

    try:
        parsed = FeedbackSignal(signal)
    except ValueError:
        _fail(f"Unknown signal '{signal}'. Use one of: {[s.value for s in FeedbackSignal]}")

    log = _build_interaction_log(_settings(ctx))
    try:
        log.record_feedback(interaction_id, parsed.value)
    except LoggingFailed as exc:
        _fail(str(exc))

    console.print(f"[bold green]Recorded[/] {parsed.value} for {interaction_id}")


@app.command("init-log")
def init_log(ctx: typer.Context) -> None:
    """Create the interaction log index if it does not exist."""
    log = _build_interaction_log(_settings(ctx))
    try:
        log.ensure_schema()
    except LoggingFailed as exc:
        _fail(str(exc))
    console.print("[bold green]Interaction log ready[/]")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show installed providers, active settings, and index size."""
    from policy_rag import __version__
    from policy_rag.embeddings.factory import available_providers as emb_providers
    from policy_rag.llm.factory import available_providers as llm_providers
    from policy_rag.vectorstore.factory import available_stores

    settings = _settings(ctx)
    console.print(f"\n[bold green]policy-rag[/] v{__version__}\n")

    table = Table(title="Components")
    table.add_column("Layer", style="cyan")
    table.add_column("Active")
    table.add_column("Available")

    table.add_row(
        "Embedding Providers",
        f"{settings.embedding.provider} ({settings.embedding.model})",
        ", ".join(emb_providers()),
    )
    table.add_row(
        "Vector Stores",
        f"{settings.vectorstore.backend} ({settings.vectorstore.index_name})",
        ", ".join(available_stores()),
    )
    table.add_row(
        "LLM Providers",
        f"{settings.llm.provider} ({settings.llm.model})",
        ", ".join(llm_providers()),
    )
    console.print(table)

    try:
        store = _build_store(settings, settings.embedding.dimension)
        count = store.count()
    except PolicyRagError as exc:
        console.print(f"[yellow]Index unavailable:[/] {exc}")
    else:
        console.print(f"Indexed chunks: [bold]{count}[/]")


if __name__ == "__main__":
    app()
