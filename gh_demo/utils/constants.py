DEFAULT_CONFIG_PATH: str = ".github/demos"
CONFIG_PATH_ENV_VAR: str = "GH_DEMO_CONFIG_PATH"

ISSUES_FILE: str = "issues.json"
DISCUSSIONS_FILE: str = "discussions.json"
PULL_REQUESTS_FILE: str = "prs.json"
LABELS_FILE: str = "labels.json"
PRESERVE_FILE: str = "preserve.json"
SETTINGS_FILE: str = "config.yaml"
PROJECT_FILE: str = "project.json"

DEFAULT_LABEL_COLOR: str = "ededed"
DEFAULT_LABEL_DESCRIPTION: str = "Label created by gh-demo hydration tool"

PROJECT_FIELD_COLORS: frozenset[str] = frozenset(
    {"GRAY", "BLUE", "GREEN", "YELLOW", "ORANGE", "RED", "PINK", "PURPLE"}
)
DEFAULT_PROJECT_FIELD_COLOR: str = "GRAY"

# Per API call, in seconds
DEFAULT_API_TIMEOUT: int = 30
PAGE_SIZE: int = 100

GITHUB_GRAPHQL_URL: str = "https://api.github.com/graphql"
