"""
VARK Modules Classroom - Runtime components for delivering modules.

This module provides:
- SectionProgressTracker: Track section completion in a session
- NavigationGate / SectionNavigator: Gated section navigation
- ModuleCompletionCoordinator: Detect completion, compute outcome and badge
- CompletionEffects: Execute completion side effects
- CompletionScheduler: Debounce before the completion check
- ModuleSession: The learner-facing flow tying it all together
- ModuleLoader: Load authored modules
- SQLiteStore: Reference persistence service
"""

from .progress import (
    SectionProgressTracker,
    ProgressListener,
)

from .navigator import (
    NavigationGate,
    NavigationDecision,
    NavigationAction,
    SectionNavigator,
    can_advance,
    SUBMIT_ASSESSMENT_FIRST,
    COMPLETE_SECTION_FIRST,
)

from .completion import (
    ModuleCompletionCoordinator,
    assign_badge,
    compute_final_score,
    count_perfect_sections,
    find_test_score,
    notification_priority,
    round_half_up,
)

from .effects import (
    CompletionEffects,
    EffectFailure,
    EffectReport,
    Notifier,
    StoreNotifier,
)

from .scheduler import CompletionScheduler

from .store import (
    PersistenceService,
    SQLiteStore,
    to_record,
)

from .loader import (
    ModuleLoader,
    ModuleSummary,
    load_module_file,
)

from .session import (
    ModuleSession,
    CompletionResult,
)

from .stats import (
    get_learner_stats,
    get_module_stats,
)

__all__ = [
    # Progress
    "SectionProgressTracker",
    "ProgressListener",
    # Navigator
    "NavigationGate",
    "NavigationDecision",
    "NavigationAction",
    "SectionNavigator",
    "can_advance",
    "SUBMIT_ASSESSMENT_FIRST",
    "COMPLETE_SECTION_FIRST",
    # Completion
    "ModuleCompletionCoordinator",
    "assign_badge",
    "compute_final_score",
    "count_perfect_sections",
    "find_test_score",
    "notification_priority",
    "round_half_up",
    # Effects
    "CompletionEffects",
    "EffectFailure",
    "EffectReport",
    "Notifier",
    "StoreNotifier",
    # Scheduler
    "CompletionScheduler",
    # Store
    "PersistenceService",
    "SQLiteStore",
    "to_record",
    # Loader
    "ModuleLoader",
    "ModuleSummary",
    "load_module_file",
    # Session
    "ModuleSession",
    "CompletionResult",
    # Stats
    "get_learner_stats",
    "get_module_stats",
]
