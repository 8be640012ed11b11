"""
Main Orchestrator for Account Manager

This module ties the components together and defines the four
operations the host application calls:
1. Load   (read → normalize)
2. Save   (normalize → write)
3. Import (parse → reconcile → normalize → write)
4. Storage location (diagnostic)

DESIGN DECISION: Every operation is a full read-[merge]-normalize-write
cycle and returns the resulting Dataset. Nothing is cached between calls,
so a file edited by hand between two operations is picked up and repaired.

Failures:
- Storage errors propagate to the caller with the offending path
- Strict-mode format errors propagate before anything is written
- Data inconsistencies never propagate; the Normalizer repairs them
"""

from typing import Optional, Union

from account_manager.audit import AuditLogger, configure_logging, create_correlation_id
from account_manager.config import Settings, get_settings
from account_manager.identifiers import Clock, IdGenerator, SequentialIdGenerator, now_ms
from account_manager.models.dataset import Dataset, ImportResult
from account_manager.normalization import DEFAULT_GROUP_NAME, Normalizer
from account_manager.parsing import ImportFormatError, ImportMode, parse_accounts
from account_manager.parsing.drafts import DEFAULT_AUTHENTICATOR_URL
from account_manager.parsing.tokenizer import DEFAULT_BLOCK_SEPARATOR
from account_manager.reconciliation import Reconciler
from account_manager.services.storage import (
    DatasetStorageInterface,
    JsonFileDatasetStorage,
    StorageError,
)


class AccountManager:
    """
    Host-facing facade over storage, parsing, reconciliation and
    normalization.

    All collaborators are injectable; defaults come from configuration.
    """

    def __init__(
        self,
        storage: DatasetStorageInterface,
        normalizer: Optional[Normalizer] = None,
        reconciler: Optional[Reconciler] = None,
        audit_logger: Optional[AuditLogger] = None,
        import_mode: ImportMode = ImportMode.FREEFORM,
        block_separator: Optional[str] = DEFAULT_BLOCK_SEPARATOR,
        default_authenticator_url: str = DEFAULT_AUTHENTICATOR_URL,
        max_input_chars: Optional[int] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
    ):
        clock = clock or now_ms
        id_generator = id_generator or SequentialIdGenerator(clock)

        self._storage = storage
        self._normalizer = normalizer or Normalizer(id_generator=id_generator, clock=clock)
        self._reconciler = reconciler or Reconciler(
            normalizer=self._normalizer,
            id_generator=id_generator,
            clock=clock,
        )
        self._audit_logger = audit_logger or AuditLogger()
        self._import_mode = ImportMode(import_mode)
        self._block_separator = block_separator
        self._default_authenticator_url = default_authenticator_url
        self._max_input_chars = max_input_chars

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def import_mode(self) -> ImportMode:
        return self._import_mode

    def storage_location(self) -> str:
        """Absolute path (or URI) of the backing store. Diagnostic only."""
        return self._storage.location()

    def load(self) -> Dataset:
        """
        Read and normalize the stored dataset.

        Returns an empty dataset when nothing is stored yet.
        The repaired version is returned but not written back.

        Raises:
            StorageError: If the store cannot be read or parsed
        """
        correlation_id = create_correlation_id()
        dataset = self._read(correlation_id)
        self._audit_logger.log_dataset_loaded(
            self.storage_location(), dataset, correlation_id
        )
        return dataset

    def save(self, dataset: Dataset) -> Dataset:
        """
        Normalize ``dataset``, persist it and return what was written.

        Raises:
            StorageError: If the store cannot be written
        """
        correlation_id = create_correlation_id()
        normalized, report = self._normalizer.normalize_with_report(dataset)
        self._audit_logger.log_repairs(self.storage_location(), report, correlation_id)
        self._write(normalized, correlation_id)
        return normalized

    def import_text(
        self,
        raw: str,
        mode: Optional[Union[ImportMode, str]] = None,
    ) -> ImportResult:
        """
        Parse pasted text and merge it into the stored dataset.

        Args:
            raw: Pasted account dump
            mode: Import grammar; defaults to the configured one

        Returns:
            Counts (imported = created + updated) and the resulting dataset.
            When no account is found the stored dataset is returned as is
            and nothing is written.

        Raises:
            ImportFormatError: Strict mode, malformed input. Nothing is written.
            StorageError: If the store cannot be read or written
        """
        correlation_id = create_correlation_id()
        mode = ImportMode(mode) if mode is not None else self._import_mode

        try:
            if self._max_input_chars is not None and len(raw) > self._max_input_chars:
                raise ImportFormatError(
                    f"Pasted text is {len(raw)} characters; "
                    f"the limit is {self._max_input_chars}"
                )
            drafts = parse_accounts(
                raw,
                mode=mode,
                block_separator=self._block_separator,
                default_authenticator_url=self._default_authenticator_url,
            )
        except ImportFormatError as e:
            self._audit_logger.log_import_rejected(
                mode=mode.value,
                error_message=str(e),
                position=e.position,
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_import_parsed(mode.value, len(drafts), correlation_id)
        current = self._read(correlation_id)

        if not drafts:
            self._audit_logger.log_import_empty(mode.value, correlation_id)
            return ImportResult(imported=0, created=0, updated=0, data=current)

        outcome = self._reconciler.merge(current, drafts)
        self._audit_logger.log_repairs(self.storage_location(), outcome.report, correlation_id)
        self._write(outcome.dataset, correlation_id)
        self._audit_logger.log_import_completed(
            path=self.storage_location(),
            created=outcome.created,
            updated=outcome.updated,
            correlation_id=correlation_id,
        )

        return ImportResult(
            imported=outcome.imported,
            created=outcome.created,
            updated=outcome.updated,
            data=outcome.dataset,
        )

    def _read(self, correlation_id) -> Dataset:
        try:
            raw = self._storage.read()
        except StorageError as e:
            self._audit_logger.log_storage_failed(
                self.storage_location(), "read", str(e), correlation_id
            )
            raise
        dataset, report = self._normalizer.normalize_with_report(raw)
        self._audit_logger.log_repairs(self.storage_location(), report, correlation_id)
        return dataset

    def _write(self, dataset: Dataset, correlation_id) -> None:
        try:
            self._storage.write(dataset)
        except StorageError as e:
            self._audit_logger.log_storage_failed(
                self.storage_location(), "write", str(e), correlation_id
            )
            raise
        self._audit_logger.log_dataset_saved(
            self.storage_location(), dataset, correlation_id
        )


def create_app_components(
    storage: Optional[DatasetStorageInterface] = None,
    settings: Optional[Settings] = None,
) -> AccountManager:
    """
    Factory function to build an AccountManager from configuration.

    Args:
        storage: Storage backend. Defaults to the JSON file at the
                 configured path.
        settings: Settings to use instead of the cached environment ones.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    import_settings = settings.imports

    configure_logging(app_settings.effective_log_level)

    if storage is None:
        storage = JsonFileDatasetStorage(settings.storage.path)

    clock = now_ms
    id_generator = SequentialIdGenerator(clock)
    normalizer = Normalizer(
        id_generator=id_generator,
        clock=clock,
        default_group_name=app_settings.default_group_name or DEFAULT_GROUP_NAME,
    )

    return AccountManager(
        storage=storage,
        normalizer=normalizer,
        import_mode=ImportMode(import_settings.mode),
        block_separator=import_settings.block_separator or None,
        default_authenticator_url=import_settings.default_authenticator_url,
        max_input_chars=import_settings.max_input_chars,
        id_generator=id_generator,
        clock=clock,
    )
