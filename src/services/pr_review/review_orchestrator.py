"""
Review Orchestrator

Drives one review run through its states:

    pending -> running -> done | error
    pending -> error          (run could not be scheduled)

``trigger_review`` creates the Review row and hands the run to the worker
pool without waiting for it. ``run_review`` owns that row until it reaches a
terminal state; no other run ever writes to it.

Run steps are sequential: fetch files -> filter -> analyze -> publish ->
persist. Any failure moves the review to ``error`` with the failure message
as its summary. An empty reviewable diff is not a failure.
"""

from typing import Callable, Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import settings
from src.models.schemas.pr_review.review_output import AnalysisResult
from src.services.credentials.credential_service import CredentialService, LLMCredential
from src.services.diff_filtering.diff_filter import filter_reviewable_files
from src.services.github.pr_api_client import PRApiClient
from src.services.github.review_publisher import ReviewPublisher
from src.services.llm.base_client import BaseLLMClient
from src.services.llm.llm_factory import LLMFactory
from src.services.pr_review.review_generation.service import ReviewAnalysisService
from src.services.pr_review.review_store import ReviewStore
from src.utils.logging import Logger
from src.workers.review_worker import ReviewWorkerPool, WorkerPoolClosedError

NO_REVIEWABLE_CHANGES_SUMMARY = "No reviewable changes found in this pull request."

LLMClientFactory = Callable[[LLMCredential], BaseLLMClient]


def default_llm_client_factory(credential: LLMCredential) -> BaseLLMClient:
    return LLMFactory.create(credential.provider, credential.api_key)


class ReviewOrchestrator:
    def __init__(
        self,
        session_factory: sessionmaker,
        worker_pool: ReviewWorkerPool,
        pr_client: Optional[PRApiClient] = None,
        publisher: Optional[ReviewPublisher] = None,
        analysis_service: Optional[ReviewAnalysisService] = None,
        llm_client_factory: Optional[LLMClientFactory] = None
    ):
        self.session_factory = session_factory
        self.worker_pool = worker_pool
        self.pr_client = pr_client or PRApiClient()
        self.publisher = publisher or ReviewPublisher(self.pr_client)
        self.analysis_service = analysis_service or ReviewAnalysisService()
        self.llm_client_factory = llm_client_factory or default_llm_client_factory
        self.logger = Logger(__name__)

    def trigger_review(self, pr_id: UUID) -> UUID:
        """
        Create a pending Review for the PR and schedule its run.

        Returns the review id as soon as the run is scheduled.

        Raises:
            WorkerPoolClosedError: If the pool is shutting down; no Review is created
        """
        if self.worker_pool.closed:
            raise WorkerPoolClosedError("Review worker pool is shut down")

        db: Session = self.session_factory()
        try:
            store = ReviewStore(db)
            review_id = store.create_review(pr_id).id

            try:
                self.worker_pool.submit(
                    lambda: self.run_review(review_id),
                    name=f"review-{review_id}",
                )
            except Exception as e:
                self.logger.error(f"Could not schedule review {review_id}: {e}")
                store.fail_review(review_id, f"Review could not be scheduled: {e}")
                raise
        finally:
            db.close()

        self.logger.info("Review scheduled", extra={"review_id": str(review_id), "pr_id": str(pr_id)})
        return review_id

    async def run_review(self, review_id: UUID) -> None:
        """Execute one review run to a terminal state. Never raises for run failures."""
        log = self.logger.bind(review_id=str(review_id))
        db: Session = self.session_factory()
        store = ReviewStore(db)

        try:
            await run_in_threadpool(store.mark_running, review_id)
        except Exception as e:
            log.error(f"Could not start review: {e}")
            db.close()
            return

        try:
            await self._execute(store, CredentialService(db), review_id, log)
        except Exception as e:
            log.exception(f"Review failed: {e}")
            try:
                await run_in_threadpool(self._record_failure, db, store, review_id, f"Review failed: {e}")
            except Exception as persist_error:
                log.error(f"Could not record review failure: {persist_error}")
        finally:
            db.close()

    @staticmethod
    def _record_failure(db: Session, store: ReviewStore, review_id: UUID, message: str) -> None:
        db.rollback()
        store.fail_review(review_id, message)

    async def _execute(
        self,
        store: ReviewStore,
        credentials: CredentialService,
        review_id: UUID,
        log: Logger
    ) -> None:
        # Store and credential calls use a sync session; keep them off the event loop
        target = await run_in_threadpool(store.load_review_target, review_id)
        log = log.bind(repository=target.repo_full_name, pr_number=target.pr_number)
        access_token = await run_in_threadpool(credentials.get_github_access_token, target.owner_user_id)

        files = await self.pr_client.get_pr_files(target.repo_full_name, target.pr_number, access_token)
        reviewable = filter_reviewable_files(files, max_patch_chars=settings.MAX_PATCH_CHARACTERS)
        log.info(f"{len(reviewable)} of {len(files)} changed files are reviewable")

        if not reviewable:
            await run_in_threadpool(store.complete_review, review_id, NO_REVIEWABLE_CHANGES_SUMMARY, 0)
            log.info("Review done: no reviewable changes")
            return

        credential = await run_in_threadpool(credentials.resolve_llm_credential, target.owner_user_id)
        llm_client = self.llm_client_factory(credential)
        result: AnalysisResult = await self.analysis_service.analyze(reviewable, target.custom_rules, llm_client)

        publish_result = await self.publisher.publish(
            target.repo_full_name,
            target.pr_number,
            access_token,
            result.summary,
            result.comments,
        )
        if publish_result.used_fallback:
            log.warning("Review published without inline comments")

        await run_in_threadpool(
            store.complete_review, review_id, result.summary, result.tokens_used, result.comments
        )
        log.info(
            "Review done",
            extra={"comments": len(result.comments), "tokens_used": result.tokens_used},
        )
