import asyncio
import logging
from dataclasses import dataclass, field

from errors import DatastoreError

logger = logging.getLogger(__name__)

CLEARABLE_CATEGORIES = frozenset({"rules_upload_pdf"})

STAGE_SELECT_RECORDS = "select_records"
STAGE_DELETE_RECORDS = "delete_records"
STAGE_CLEAR_RULES = "clear_rules"
STAGE_CLEAR_RAG_RULES = "clear_rag_rules"

# derived data must not outlive its source documents
FATAL_STAGES = frozenset({STAGE_CLEAR_RULES, STAGE_CLEAR_RAG_RULES})


@dataclass
class ClearResult:
    records_found: int = 0
    remote_delete_failures: list[str] = field(default_factory=list)
    db_errors: list[str] = field(default_factory=list)

    @property
    def fatal(self) -> bool:
        return any(stage in FATAL_STAGES for stage in self.db_errors)


async def _destroy_all(store, public_ids: list[str]) -> list[str]:
    results = await asyncio.gather(
        *(asyncio.to_thread(store.destroy, public_id) for public_id in public_ids),
        return_exceptions=True,
    )
    failures: list[str] = []
    for public_id, outcome in zip(public_ids, results):
        if isinstance(outcome, Exception):
            logger.warning("CLEAR: remote delete failed public_id=%s error=%s", public_id, outcome)
            failures.append(public_id)
    return failures


async def clear_category(repo, store, user_id: str, category: str) -> ClearResult:
    """
    Reset a category for a user before a fresh upload.

    Order matters: records are listed, their remote objects destroyed
    concurrently, the records bulk-deleted, and finally both derived rule
    tables are emptied. Only the derived-table steps make the result fatal;
    everything before them is logged and skipped over.
    """
    if category not in CLEARABLE_CATEGORIES:
        raise ValueError(f"Category {category!r} does not support clearing")

    result = ClearResult()

    try:
        records = await asyncio.to_thread(repo.list_for_category, user_id, category)
    except DatastoreError as exc:
        logger.error("CLEAR: listing records failed user=%s category=%s error=%s", user_id, category, exc.detail)
        result.db_errors.append(STAGE_SELECT_RECORDS)
        records = []

    result.records_found = len(records)

    if records:
        result.remote_delete_failures = await _destroy_all(
            store, [record.cloudinary_public_id for record in records]
        )

        try:
            await asyncio.to_thread(repo.delete_many, [record.id for record in records])
        except DatastoreError as exc:
            logger.error("CLEAR: deleting records failed user=%s category=%s error=%s", user_id, category, exc.detail)
            result.db_errors.append(STAGE_DELETE_RECORDS)

    # TODO: scope to the caller's records once derived rows carry an owner
    for stage, clear in ((STAGE_CLEAR_RULES, repo.clear_rules), (STAGE_CLEAR_RAG_RULES, repo.clear_rag_rules)):
        try:
            await asyncio.to_thread(clear)
        except DatastoreError as exc:
            logger.error("CLEAR: %s failed error=%s", stage, exc.detail)
            result.db_errors.append(stage)

    logger.info(
        "CLEAR: user=%s category=%s records=%s remote_failures=%s db_errors=%s",
        user_id,
        category,
        result.records_found,
        len(result.remote_delete_failures),
        result.db_errors,
    )
    return result
