"""Repository metrics.

Each module folds commit history (or the HEAD snapshot) into a report
dataclass and classifies the result against fixed thresholds.
"""

from .branches import BranchReport, analyze_branches
from .bus_factor import BusFactorReport, analyze_bus_factor, calculate_bus_factor
from .cadence import CadenceReport, analyze_cadence
from .churn import ChurnReport, analyze_churn, calculate_churn
from .churn_files import FileChurn, analyze_file_churn, calculate_file_churn
from .commit_size import CommitSize, analyze_commit_sizes, calculate_commit_risk
from .components import ComponentReport, analyze_component_creation
from .dead_zones import DeadZoneReport, analyze_dead_zones
from .directory_entropy import EntropyReport, analyze_directory_entropy
from .health import HealthReport, run_health_check
from .high_risk import HighRiskReport, analyze_high_risk_commits
from .lead_time import LeadTimeReport, analyze_lead_time
from .onboarding import OnboardingReport, analyze_onboarding
from .ownership import OwnershipReport, analyze_ownership
from .survival import SurvivalReport, analyze_survival
from .test_ratio import TestRatioReport, analyze_test_ratio, calculate_test_ratio

__all__ = [
    "BranchReport",
    "BusFactorReport",
    "CadenceReport",
    "ChurnReport",
    "CommitSize",
    "ComponentReport",
    "DeadZoneReport",
    "EntropyReport",
    "FileChurn",
    "HealthReport",
    "HighRiskReport",
    "LeadTimeReport",
    "OnboardingReport",
    "OwnershipReport",
    "SurvivalReport",
    "TestRatioReport",
    "analyze_branches",
    "analyze_bus_factor",
    "analyze_cadence",
    "analyze_churn",
    "analyze_commit_sizes",
    "analyze_component_creation",
    "analyze_dead_zones",
    "analyze_directory_entropy",
    "analyze_file_churn",
    "analyze_high_risk_commits",
    "analyze_lead_time",
    "analyze_onboarding",
    "analyze_ownership",
    "analyze_survival",
    "analyze_test_ratio",
    "calculate_bus_factor",
    "calculate_churn",
    "calculate_commit_risk",
    "calculate_file_churn",
    "calculate_test_ratio",
    "run_health_check",
]
