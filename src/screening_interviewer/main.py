"""
Main entry point for the screening interviewer.
"""

import argparse
import asyncio
import logging
import sys

from screening_interviewer.agents.gateway import SemanticExtractionGateway
from screening_interviewer.config import ConfigurationError, Settings, get_settings
from screening_interviewer.io.text_interface import TextInterface
from screening_interviewer.models.llm_client import LLMClient
from screening_interviewer.orchestrator.interview_orchestrator import InterviewOrchestrator
from screening_interviewer.orchestrator.interview_state import InterviewSession
from screening_interviewer.orchestrator.schemas import InterviewConfig
from screening_interviewer.orchestrator.session_store import InMemorySessionStore
from screening_interviewer.retrieval.job_store import (
    FileJobDescriptionStore,
    HttpJobDescriptionStore,
    JobDescriptionProvider,
    JobDescriptionStoreBase,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_interview_config(settings: Settings) -> InterviewConfig:
    return InterviewConfig(
        available_jd_ids=settings.available_jd_ids,
        max_questions=settings.max_questions,
        history_window=settings.history_window,
        organization_name=settings.organization_name,
    )


def build_jd_store(settings: Settings) -> JobDescriptionStoreBase:
    """Pick the document store: a local directory wins over an HTTP URL."""
    if settings.jd_store_path:
        return FileJobDescriptionStore(settings.jd_store_path)
    return HttpJobDescriptionStore(settings.jd_store_url or "", timeout=settings.llm_timeout)


def build_orchestrator(settings: Settings) -> InterviewOrchestrator:
    """
    Wire up the orchestrator and its collaborators from settings.

    Args:
        settings: Validated application settings.

    Returns:
        Ready-to-use orchestrator.
    """
    config = build_interview_config(settings)

    llm_client = LLMClient(
        endpoint=settings.llm_endpoint,
        api_key=settings.llm_api_key.get_secret_value(),
        deployment=settings.llm_deployment_name,
        api_version=settings.llm_api_version,
        timeout=settings.llm_timeout,
    )
    gateway = SemanticExtractionGateway(
        llm_client,
        timeout=settings.llm_timeout,
        organization=settings.organization_name,
    )

    def new_session(candidate_id: str) -> InterviewSession:
        return InterviewSession(
            candidate_id=candidate_id,
            available_jd_ids=config.available_jd_ids,
            max_questions=config.max_questions,
        )

    store = InMemorySessionStore(new_session, idle_timeout=settings.session_idle_timeout)
    jd_provider = JobDescriptionProvider(build_jd_store(settings))

    return InterviewOrchestrator(
        config=config,
        store=store,
        gateway=gateway,
        jd_provider=jd_provider,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="screening-interviewer")
    parser.add_argument(
        "--candidate-id",
        default="terminal-candidate",
        help="Channel identity used for the terminal session",
    )
    parser.add_argument(
        "--show-ssml",
        action="store_true",
        help="Print the spoken markup of every interviewer message",
    )
    return parser


async def run_interview(settings: Settings, argv: list[str] | None = None) -> None:
    """
    Run an interactive screening interview in the terminal.

    Args:
        settings: Validated application settings.
        argv: Command-line arguments.
    """
    logger = logging.getLogger(__name__)
    args = build_parser().parse_args(argv)

    logger.info("Initializing screening interviewer...")
    logger.debug(f"Using deployment: {settings.llm_deployment_name}")

    orchestrator = build_orchestrator(settings)
    interface = TextInterface(
        orchestrator,
        candidate_id=args.candidate_id,
        show_ssml=args.show_ssml,
    )

    logger.info("Starting interview session...")
    try:
        await interface.run()
    finally:
        await orchestrator.close()


def main() -> None:
    """Main entry point for the application."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        setup_logging()
        logging.critical(f"Refusing to start: {e}")
        sys.exit(2)

    setup_logging(settings.log_level)

    try:
        asyncio.run(run_interview(settings, sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nInterview session terminated by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
