"""Payroll export services."""

from payroll_export.services.artifact_store import (
    ArtifactNotFoundError,
    ArtifactStore,
    ArtifactWriteError,
    InvalidSignatureError,
    LocalArtifactStore,
)
from payroll_export.services.audit_service import AuditService, AuditSink
from payroll_export.services.award_service import AwardRateNotFoundError, AwardRateService
from payroll_export.services.export_service import (
    EmptyExportError,
    ExportBlockedError,
    ExportLifecycleService,
    ExportNotFoundError,
    GenerateExportInput,
    ReasonRequiredError,
)
from payroll_export.services.locking_service import (
    TimesheetLockConflictError,
    TimesheetLockingService,
    TimesheetNotFoundError,
)
from payroll_export.services.mapping_service import (
    DuplicateMappingError,
    MappingNotFoundError,
    MappingService,
)
from payroll_export.services.pay_period_service import PayPeriodNotFoundError, PayPeriodService
from payroll_export.services.serializer import ExportSerializer, PayrollProvider
from payroll_export.services.state_machine import (
    ExportStatus,
    InvalidTransitionError,
    PayPeriodStateMachine,
    PayPeriodStatus,
)
from payroll_export.services.types import Actor
from payroll_export.services.validation_service import (
    ExportValidator,
    TimesheetForExport,
    ValidationResult,
)

__all__ = [
    "Actor",
    "ArtifactNotFoundError",
    "ArtifactStore",
    "ArtifactWriteError",
    "AuditService",
    "AuditSink",
    "AwardRateNotFoundError",
    "AwardRateService",
    "DuplicateMappingError",
    "EmptyExportError",
    "ExportBlockedError",
    "ExportLifecycleService",
    "ExportNotFoundError",
    "ExportSerializer",
    "ExportStatus",
    "ExportValidator",
    "GenerateExportInput",
    "InvalidSignatureError",
    "InvalidTransitionError",
    "LocalArtifactStore",
    "MappingNotFoundError",
    "MappingService",
    "PayPeriodNotFoundError",
    "PayPeriodService",
    "PayPeriodStateMachine",
    "PayPeriodStatus",
    "PayrollProvider",
    "ReasonRequiredError",
    "TimesheetForExport",
    "TimesheetLockConflictError",
    "TimesheetLockingService",
    "TimesheetNotFoundError",
    "ValidationResult",
]
