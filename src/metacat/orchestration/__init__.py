"""
metacat.orchestration — multi-stage pipelines over the ops layer.

::

    StepClient              ─ black-box step invocation (status + body)
      └── InProcessStepClient ─ ops functions on worker threads
    run_alignment           ─ vocabulary → term → relation → column → validation
    build_validation_report ─ term + relation validation, fetched concurrently
"""

from metacat.orchestration.alignment import ALIGNMENT_STEPS, parse_apply_flag, run_alignment
from metacat.orchestration.report import UnifiedValidationIssue, build_validation_report
from metacat.orchestration.steps import InProcessStepClient, StepClient, StepOperation, StepResponse

__all__ = [
    "ALIGNMENT_STEPS",
    "InProcessStepClient",
    "StepClient",
    "StepOperation",
    "StepResponse",
    "UnifiedValidationIssue",
    "build_validation_report",
    "parse_apply_flag",
    "run_alignment",
]
