"""
Static repository analysis.

Pure, deterministic building blocks used by the analysis pipeline.

Module structure:
- url.py: Repository URL validation and parsing
- file_filter.py: File tree classification and reduction stats
- tech_stack.py: Framework/runtime/tooling detection from manifests
- database.py: Database requirement detection and merging
- env_vars.py: Environment variable extraction
- constants.py: Rule tables
- types.py: Intermediate result types
"""

from app.services.analysis.database import (
    detect_database_from_docker_compose,
    detect_database_requirements,
    merge_database_requirements,
)
from app.services.analysis.env_vars import (
    categorize_env_var,
    extract_env_vars_from_docker_compose,
    extract_env_vars_from_readme,
    extract_environment_variables,
    generate_env_template,
    group_env_vars_by_category,
    validate_env_var_name,
)
from app.services.analysis.file_filter import (
    filter_file_tree,
    get_filtering_stats,
    is_critical_file,
    should_analyze_file,
)
from app.services.analysis.tech_stack import TechStackDetector
from app.services.analysis.types import FilteredFileTree, FilteringStats, ParsedGitHubUrl
from app.services.analysis.url import (
    construct_github_url,
    parse_github_url,
    repo_id_from_url,
    validate_github_url,
)

__all__ = [
    # URL
    "ParsedGitHubUrl",
    "construct_github_url",
    "parse_github_url",
    "repo_id_from_url",
    "validate_github_url",
    # File tree
    "FilteredFileTree",
    "FilteringStats",
    "filter_file_tree",
    "get_filtering_stats",
    "is_critical_file",
    "should_analyze_file",
    # Tech stack
    "TechStackDetector",
    # Databases
    "detect_database_from_docker_compose",
    "detect_database_requirements",
    "merge_database_requirements",
    # Environment
    "categorize_env_var",
    "extract_env_vars_from_docker_compose",
    "extract_env_vars_from_readme",
    "extract_environment_variables",
    "generate_env_template",
    "group_env_vars_by_category",
    "validate_env_var_name",
]
