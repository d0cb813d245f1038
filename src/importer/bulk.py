"""Replay a dependency-ordered list of orbs against a target registry.

Every orb gets a fixed number of attempts. Failures are treated
asymmetrically: a failed publish only affects that orb, so it is dropped
once its attempts run out and the run goes on; a failed namespace, orb id
or version lookup would fail the same way for every following orb, so
running out of attempts there aborts the whole run.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from importer.errors import ImportAbortedError, PublishError, RegistryTransientError
from importer.models import ImportOutcome
from importer.session import ImportSession
from registry.base import RegistryWriter
from registry.errors import RegistryError
from resolver.models import VersionedOrb

logger = logging.getLogger(__name__)

CONFIG_ERROR_MARKER = "ERROR IN CONFIG FILE"


def _ensure_namespace(writer: RegistryWriter, session: ImportSession, namespace: str) -> None:
    if session.has_checked_namespace(namespace):
        return
    try:
        exists = writer.namespace_exists(namespace)
    except RegistryError as exc:
        raise RegistryTransientError(f"error while querying namespace {namespace!r}: {exc}") from exc

    if not exists:
        try:
            writer.create_namespace(namespace)
        except RegistryError as exc:
            raise RegistryTransientError(f"error while creating namespace {namespace!r}: {exc}") from exc
        logger.info("new namespace %r created", namespace)

    session.mark_namespace_checked(namespace)
    logger.debug("cached namespace %r", namespace)


def _ensure_orb_id(writer: RegistryWriter, session: ImportSession, orb: VersionedOrb) -> str:
    orb_id = session.cached_orb_id(orb.name)
    if orb_id is not None:
        return orb_id
    try:
        orb_id = writer.find_orb_id(orb.name)
    except RegistryError as exc:
        raise RegistryTransientError(f"error while querying orb {orb.name!r}: {exc}") from exc

    if not orb_id:
        try:
            orb_id = writer.create_orb(orb.namespace, orb.shortname)
        except RegistryError as exc:
            raise RegistryTransientError(f"error while registering orb {orb.name!r}: {exc}") from exc
        logger.info("new orb %r registered with ID %r", orb.name, orb_id)

    session.cache_orb_id(orb.name, orb_id)
    logger.debug("cached orb %r with ID %r", orb.name, orb_id)
    return orb_id


def _version_exists(writer: RegistryWriter, ref: str) -> bool:
    try:
        return writer.version_exists(ref)
    except RegistryError as exc:
        raise RegistryTransientError(f"error while querying orb info {ref!r}: {exc}") from exc


def _publish(writer: RegistryWriter, orb: VersionedOrb, orb_id: str) -> None:
    logger.info("importing version %r of orb %r having ID %r", orb.version, orb.name, orb_id)
    try:
        writer.publish_version(orb.source, orb_id, orb.version)
    except RegistryError as exc:
        msg = f"unable to publish versioned orb {orb.ref!r}"
        if CONFIG_ERROR_MARKER in str(exc):
            msg += "; possibly because the orb is using unsupported syntax for your server instance"
        raise PublishError(f"{msg}: {exc}") from exc


def import_orb(writer: RegistryWriter, session: ImportSession, orb: VersionedOrb) -> bool:
    """Make one orb version available on the target, in a single attempt.

    Returns:
        bool: True if the version was published, False if it already existed.

    Raises:
        RegistryTransientError: Namespace, orb id or version lookup failed.
        PublishError: Publishing the version failed.
    """
    _ensure_namespace(writer, session, orb.namespace)
    orb_id = _ensure_orb_id(writer, session, orb)
    if _version_exists(writer, orb.ref):
        logger.info("%r already exists on the target", orb.ref)
        return False
    _publish(writer, orb, orb_id)
    logger.info("imported %r without errors", orb.ref)
    return True


def import_orbs_with_retries(
    writer: RegistryWriter,
    orbs: Iterable[VersionedOrb],
    max_attempts: Optional[int] = None,
    retry_delay: Optional[float] = None,
) -> ImportOutcome:
    """Import orbs in the given order with bounded retries.

    Args:
        writer: Client of the target registry.
        orbs: Orbs in dependency-first order.
        max_attempts: Attempts per orb (default ``Constants.IMPORT_MAX_ATTEMPTS``).
        retry_delay: Seconds to wait between attempts
            (default ``Constants.IMPORT_RETRY_DELAY_SEC``).

    Returns:
        ImportOutcome: Available and dropped refs, partitioning the input.

    Raises:
        ImportAbortedError: A lookup kept failing for one orb; nothing is
            returned for the run.
        ValueError: The attempt budget is below 1 or the delay is negative.
    """
    attempts = Constants.IMPORT_MAX_ATTEMPTS if max_attempts is None else max_attempts
    delay = Constants.IMPORT_RETRY_DELAY_SEC if retry_delay is None else retry_delay
    if attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    if delay < 0:
        raise ValueError("retry_delay must not be negative")

    logger.info("importing listed orbs")
    session = ImportSession()
    outcome = ImportOutcome()

    for orb in orbs:
        last_error: Optional[Exception] = None
        logger.info("examining %r", orb.ref)

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                time.sleep(delay)
            logger.info("attempt %d of %d for %r", attempt, attempts, orb.ref)

            try:
                import_orb(writer, session, orb)
            except PublishError as exc:
                logger.warning("error happened while importing %r: %s", orb.ref, exc)
                if attempt == attempts:
                    logger.warning("giving up to import %r; dropping it to continue", orb.ref)
                    outcome.dropped.append(orb.ref)
                    last_error = None
                else:
                    last_error = exc
                continue
            except RegistryTransientError as exc:
                logger.warning("attempt %d for %r failed: %s", attempt, orb.ref, exc)
                last_error = exc
                continue

            outcome.available.append(orb.ref)
            last_error = None
            break

        if last_error is not None:
            raise ImportAbortedError(orb.ref, attempts) from last_error

    if is_debug_enabled(logger):
        logger.debug(
            "Import finished",
            extra=extra_context(
                event="function_exit",
                component="importer",
                action="import_orbs_with_retries",
                outcome="success",
                count=len(outcome.available) + len(outcome.dropped),
            ),
        )
    logger.info(
        "import completed; %d available, %d dropped",
        len(outcome.available),
        len(outcome.dropped),
    )
    return outcome
